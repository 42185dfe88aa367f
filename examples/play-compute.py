from sheetquery.compute import AggregateNode, CSVDataSource, Condition, FilterNode, SortNode
from sheetquery.compute.aggregate import SumAggregation

query = SortNode(
    ["Total"],
    [True],
    AggregateNode(
        ["Product"],
        {"Total": SumAggregation("Quantity")},
        FilterNode(Condition("City", "=", "Rome"), CSVDataSource("data/sales.csv")),
    ),
)
for batch in query.batches():
    print("---")
    print(batch.columns)
    for row in batch.rows:
        print(row)

from sheetquery import MemoryTableStore, remove, select, update
from sheetquery.compute import CSVDataSource, Table
from sheetquery.utils.tabulate import tabulate

store = MemoryTableStore.from_source(CSVDataSource("data/sales.csv"))

update(store, {"set": {"City": "Milan"}, "where": {"City": ("=", "Rome"), "Price": ("<", 50)}})
remove(store, {"whereOr": {"Product": ("LIKE", "Head%"), "Quantity#1": ("<", 2)}})

columns, rows = select(
    store,
    {
        "groupBy": (["City"], {"Items": ("Quantity", "SUM"), "AvgPrice": ("Price", "AVG")}),
        "orderBy": {"Items": "DESC"},
    },
    {"asArray": True},
)
print(tabulate(Table(columns, rows)))

"""Shell commands exposing SheetQuery functionalities.

This module contains the shell commands that can be used to interact with SheetQuery.

FQuery (file query)
===================

``sheetquery-fquery`` runs JSON queries on CSV or Parquet files::

    sheetquery-fquery -t users.csv '{"columns": ["id", "name"], "where": {"age": [">=", 18]}}'

It can be tested against provided example data running it with the following command::

    sheetquery-fquery -t examples/data/sales.csv '{"groupBy": [["Product"], {"Total": ["Quantity", "SUM"]}], "orderBy": {"Total": "DESC"}}'

"""

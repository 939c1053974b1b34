"""docsql statement builders."""
from docsql.statements.aggregate import AggregationBuilder
from docsql.statements.delete import DeleteBuilder
from docsql.statements.insert import InsertBuilder
from docsql.statements.select import SelectBuilder
from docsql.statements.update import UpdateBuilder

__all__ = [
    "AggregationBuilder",
    "DeleteBuilder",
    "InsertBuilder",
    "SelectBuilder",
    "UpdateBuilder",
]

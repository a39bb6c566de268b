"""Parser for the JTQ (JSON Tables Query) language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from json_tables.parsing.query_lexer import QueryLexer
from json_tables.query import Condition, OrderBy


@dataclass
class FieldValue:
    """A ``field=value`` assignment in insert and update statements."""

    name: str
    value: Any


@dataclass
class UseQuery:
    """Select a database by name."""

    database: str


@dataclass
class ShowTablesQuery:
    """List the tables of the current database."""

    pass


@dataclass
class SelectQuery:
    """Read records from a table.

    ``mode`` is ``all``, ``first``, ``last`` or ``count``.
    """

    table: str
    mode: str = "all"
    conditions: list[Condition] = field(default_factory=list)
    order_by: OrderBy | None = None
    limit: int | None = None


@dataclass
class InsertQuery:
    """Insert one record."""

    table: str
    fields: list[FieldValue] = field(default_factory=list)

    @property
    def data(self) -> dict[str, Any]:
        return {f.name: f.value for f in self.fields}


@dataclass
class UpdateQuery:
    """Merge field values into the records matching the conditions."""

    table: str
    fields: list[FieldValue] = field(default_factory=list)
    conditions: list[Condition] = field(default_factory=list)

    @property
    def data(self) -> dict[str, Any]:
        return {f.name: f.value for f in self.fields}


Query = UseQuery | ShowTablesQuery | SelectQuery | InsertQuery | UpdateQuery


class QueryParser:
    """Parser for JTQ statements."""

    tokens = QueryLexer.tokens

    def __init__(self) -> None:
        self.lexer = QueryLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : query SEMICOLON
                     | query"""
        p[0] = p[1]

    def p_query_use(self, p: yacc.YaccProduction) -> None:
        """query : USE name"""
        p[0] = UseQuery(database=p[2])

    def p_query_show_tables(self, p: yacc.YaccProduction) -> None:
        """query : SHOW TABLES"""
        p[0] = ShowTablesQuery()

    def p_query_select_all(self, p: yacc.YaccProduction) -> None:
        """query : FROM name SELECT STAR where_clause order_clause limit_clause"""
        p[0] = SelectQuery(
            table=p[2],
            mode="all",
            conditions=p[5],
            order_by=p[6],
            limit=p[7],
        )

    def p_query_select_single(self, p: yacc.YaccProduction) -> None:
        """query : FROM name SELECT projection where_clause order_clause"""
        # limit only applies to select *
        p[0] = SelectQuery(
            table=p[2],
            mode=p[4],
            conditions=p[5],
            order_by=p[6],
        )

    def p_query_insert(self, p: yacc.YaccProduction) -> None:
        """query : INSERT name LPAREN field_value_list RPAREN
                 | INSERT INTO name LPAREN field_value_list RPAREN"""
        if len(p) == 6:
            p[0] = InsertQuery(table=p[2], fields=p[4])
        else:
            p[0] = InsertQuery(table=p[3], fields=p[5])

    def p_query_update(self, p: yacc.YaccProduction) -> None:
        """query : UPDATE name SET field_value_list where_clause"""
        p[0] = UpdateQuery(table=p[2], fields=p[4], conditions=p[5])

    def p_name(self, p: yacc.YaccProduction) -> None:
        """name : IDENTIFIER
                | STRING"""
        p[0] = p[1]

    def p_projection_single(self, p: yacc.YaccProduction) -> None:
        """projection : FIRST
                      | LAST"""
        p[0] = p[1].lower()

    def p_projection_count(self, p: yacc.YaccProduction) -> None:
        """projection : COUNT LPAREN RPAREN"""
        p[0] = "count"

    def p_where_clause_empty(self, p: yacc.YaccProduction) -> None:
        """where_clause : """
        p[0] = []

    def p_where_clause(self, p: yacc.YaccProduction) -> None:
        """where_clause : WHERE condition_list"""
        p[0] = p[2]

    def p_condition_list_single(self, p: yacc.YaccProduction) -> None:
        """condition_list : condition"""
        p[0] = [p[1]]

    def p_condition_list_and(self, p: yacc.YaccProduction) -> None:
        """condition_list : condition_list AND condition"""
        p[0] = p[1] + [p[3]]

    def p_condition(self, p: yacc.YaccProduction) -> None:
        """condition : IDENTIFIER comparison value"""
        p[0] = Condition(field=p[1], operator=p[2], value=p[3])

    def p_comparison(self, p: yacc.YaccProduction) -> None:
        """comparison : EQ
                      | NEQ
                      | LT
                      | LTE
                      | GT
                      | GTE"""
        p[0] = p[1]

    def p_comparison_like(self, p: yacc.YaccProduction) -> None:
        """comparison : LIKE"""
        p[0] = "LIKE"

    def p_order_clause_empty(self, p: yacc.YaccProduction) -> None:
        """order_clause : """
        p[0] = None

    def p_order_clause(self, p: yacc.YaccProduction) -> None:
        """order_clause : ORDER BY IDENTIFIER direction"""
        p[0] = OrderBy(field=p[3], direction=p[4])

    def p_direction_default(self, p: yacc.YaccProduction) -> None:
        """direction : """
        p[0] = "ASC"

    def p_direction(self, p: yacc.YaccProduction) -> None:
        """direction : ASC
                     | DESC"""
        p[0] = p[1].upper()

    def p_limit_clause_empty(self, p: yacc.YaccProduction) -> None:
        """limit_clause : """
        p[0] = None

    def p_limit_clause(self, p: yacc.YaccProduction) -> None:
        """limit_clause : LIMIT INTEGER"""
        p[0] = p[2]

    def p_field_value_list_single(self, p: yacc.YaccProduction) -> None:
        """field_value_list : field_value"""
        p[0] = [p[1]]

    def p_field_value_list_multiple(self, p: yacc.YaccProduction) -> None:
        """field_value_list : field_value_list COMMA field_value"""
        p[0] = p[1] + [p[3]]

    def p_field_value(self, p: yacc.YaccProduction) -> None:
        """field_value : IDENTIFIER EQ value"""
        p[0] = FieldValue(name=p[1], value=p[3])

    def p_value_literal(self, p: yacc.YaccProduction) -> None:
        """value : INTEGER
                 | FLOAT
                 | STRING"""
        p[0] = p[1]

    def p_value_negative(self, p: yacc.YaccProduction) -> None:
        """value : MINUS INTEGER
                 | MINUS FLOAT"""
        p[0] = -p[2]

    def p_value_true(self, p: yacc.YaccProduction) -> None:
        """value : TRUE"""
        p[0] = True

    def p_value_false(self, p: yacc.YaccProduction) -> None:
        """value : FALSE"""
        p[0] = False

    def p_value_null(self, p: yacc.YaccProduction) -> None:
        """value : NULL"""
        p[0] = None

    def p_value_array(self, p: yacc.YaccProduction) -> None:
        """value : LBRACKET RBRACKET
                 | LBRACKET value_list RBRACKET"""
        p[0] = p[2] if len(p) == 4 else []

    def p_value_list_single(self, p: yacc.YaccProduction) -> None:
        """value_list : value"""
        p[0] = [p[1]]

    def p_value_list_multiple(self, p: yacc.YaccProduction) -> None:
        """value_list : value_list COMMA value"""
        p[0] = p[1] + [p[3]]

    def p_value_object(self, p: yacc.YaccProduction) -> None:
        """value : LBRACE RBRACE
                 | LBRACE entry_list RBRACE"""
        p[0] = dict(p[2]) if len(p) == 4 else {}

    def p_entry_list_single(self, p: yacc.YaccProduction) -> None:
        """entry_list : entry"""
        p[0] = [p[1]]

    def p_entry_list_multiple(self, p: yacc.YaccProduction) -> None:
        """entry_list : entry_list COMMA entry"""
        p[0] = p[1] + [p[3]]

    def p_entry(self, p: yacc.YaccProduction) -> None:
        """entry : STRING COLON value"""
        p[0] = (p[1], p[3])

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="statement", **kwargs)

    def parse(self, data: str) -> Query:
        """Parse a single statement."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        return self.parser.parse(data, lexer=self.lexer.lexer)

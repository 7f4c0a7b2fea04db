# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the Part 21 recursive-descent parser."""

import pytest

from step21.model.entities import EntityRecord
from step21.model.values import (
    OMITTED,
    REDECLARED,
    BinaryValue,
    EnumerationValue,
    IntegerValue,
    ListValue,
    RealValue,
    ReferenceValue,
    StringValue,
    TypedValue,
)
from step21.parser.lexer import LexError, tokenize
from step21.parser.parser import ParsedFile, ParseError, ParseErrorKind, parse, parse_tokens

# ###############
# Test Helpers
# ###############


def _wrap(data: str, header: str = "FILE_SCHEMA(('TEST'));") -> str:
    """Embed data-section statements in a complete file."""
    return f"ISO-10303-21;\nHEADER;\n{header}\nENDSEC;\nDATA;\n{data}\nENDSEC;\nEND-ISO-10303-21;\n"


def _records(data: str) -> dict[int, EntityRecord]:
    return {record.id: record for record in parse(_wrap(data)).records}


def _params(data: str, entity_id: int = 1) -> tuple:
    return _records(data)[entity_id].subtypes[0].parameters


def _parse_error(source: str) -> ParseError:
    with pytest.raises(ParseError) as exc_info:
        parse(source)
    return exc_info.value


# ###############
# File Structure
# ###############


class TestFileStructure:
    def test_minimal_file(self) -> None:
        result = parse("ISO-10303-21;\nHEADER;\nENDSEC;\nDATA;\nENDSEC;\nEND-ISO-10303-21;\n")
        assert isinstance(result, ParsedFile)
        assert result.header.entities == ()
        assert result.records == []

    def test_header_entities_keep_order(self) -> None:
        source = _wrap("", header="FILE_DESCRIPTION(('d'),'2;1');\nFILE_NAME('n');\nFILE_SCHEMA(('S'));")
        names = [entity.name for entity in parse(source).header.entities]
        assert names == ["FILE_DESCRIPTION", "FILE_NAME", "FILE_SCHEMA"]

    def test_header_parameters(self) -> None:
        header = parse(_wrap("")).header
        schema = header.get("FILE_SCHEMA")
        assert schema is not None
        assert schema.parameters == (ListValue(items=(StringValue(value="TEST"),)),)
        assert header.get("FILE_NAME") is None

    def test_wrapper_is_optional(self) -> None:
        result = parse("HEADER;\nENDSEC;\nDATA;\n#1=A();\nENDSEC;\n")
        assert [record.id for record in result.records] == [1]

    def test_required_wrapper_missing(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("HEADER;\nENDSEC;\nDATA;\nENDSEC;\n", require_wrapper=True)
        assert exc_info.value.kind == ParseErrorKind.UNEXPECTED_TOKEN

    def test_required_wrapper_present(self) -> None:
        result = parse(_wrap("#1=A();"), require_wrapper=True)
        assert len(result.records) == 1

    def test_missing_end_wrapper(self) -> None:
        error = _parse_error("ISO-10303-21;\nHEADER;\nENDSEC;\nDATA;\nENDSEC;\n")
        assert error.kind == ParseErrorKind.MISSING_TERMINATOR

    def test_data_section_parameters_are_ignored(self) -> None:
        source = "HEADER;\nENDSEC;\nDATA(('first'),('SCHEMA'));\n#1=A();\nENDSEC;\n"
        assert [record.id for record in parse(source).records] == [1]

    def test_multiple_data_sections_are_merged(self) -> None:
        source = "HEADER;\nENDSEC;\nDATA;\n#1=A(#2);\nENDSEC;\nDATA;\n#2=B();\nENDSEC;\n"
        assert [record.id for record in parse(source).records] == [1, 2]

    def test_duplicate_id_across_data_sections(self) -> None:
        source = "HEADER;\nENDSEC;\nDATA;\n#1=A();\nENDSEC;\nDATA;\n#1=B();\nENDSEC;\n"
        assert _parse_error(source).kind == ParseErrorKind.DUPLICATE_ENTITY_ID

    def test_missing_data_section(self) -> None:
        assert _parse_error("HEADER;\nENDSEC;\n").kind == ParseErrorKind.UNEXPECTED_TOKEN

    def test_trailing_tokens_after_end(self) -> None:
        error = _parse_error(_wrap("") + "#1=A();")
        assert error.kind == ParseErrorKind.UNEXPECTED_TOKEN

    def test_comments_between_statements(self) -> None:
        records = _records("/* first */\n#1=A(/* inline */1);\n/* last */")
        assert records[1].subtypes[0].parameters == (IntegerValue(value=1),)

    def test_parse_tokens_matches_parse(self) -> None:
        source = _wrap("#1=A('x',#2);\n#2=B(.T.);")
        assert parse_tokens(tokenize(source)) == parse(source)

    def test_lex_errors_propagate(self) -> None:
        with pytest.raises(LexError):
            parse(_wrap("#1=A(@);"))


# ###############
# Entity Instances
# ###############


class TestEntityInstances:
    def test_simple_instance(self) -> None:
        record = _records("#5=CARTESIAN_POINT('',(0.,1.,2.));")[5]
        assert not record.is_complex
        assert record.type_names == ("CARTESIAN_POINT",)

    def test_records_keep_file_order(self) -> None:
        result = parse(_wrap("#3=A();\n#1=B();\n#2=C();"))
        assert [record.id for record in result.records] == [3, 1, 2]

    def test_positions_point_at_id_token(self) -> None:
        result = parse("HEADER;\nENDSEC;\nDATA;\n  #7=A();\nENDSEC;\n")
        token = result.positions[7]
        assert (token.line, token.column) == (4, 3)

    def test_statement_split_across_lines(self) -> None:
        record = _records("#1\n  = A(\n  1,\n  2\n);")[1]
        assert record.subtypes[0].parameters == (IntegerValue(value=1), IntegerValue(value=2))

    def test_entity_with_no_parameters(self) -> None:
        assert _params("#1=LENGTH_UNIT();") == ()

    def test_complex_instance(self) -> None:
        record = _records("#166=(LENGTH_UNIT()NAMED_UNIT(*)SI_UNIT(.MILLI.,.METRE.));")[166]
        assert record.is_complex
        assert record.type_names == ("LENGTH_UNIT", "NAMED_UNIT", "SI_UNIT")
        assert record.subtypes[1].parameters == (REDECLARED,)
        assert record.subtypes[2].parameters == (EnumerationValue(name="MILLI"), EnumerationValue(name="METRE"))

    def test_complex_instance_with_spaces(self) -> None:
        record = _records("#1=( A(1) B(2) );")[1]
        assert record.type_names == ("A", "B")

    def test_empty_complex_instance(self) -> None:
        error = _parse_error(_wrap("#1=();"))
        assert error.kind == ParseErrorKind.UNEXPECTED_TOKEN

    def test_user_defined_entity(self) -> None:
        assert _records("#1=!VENDOR_THING(1);")[1].type_names == ("!VENDOR_THING",)

    def test_unknown_entity_names_are_accepted(self) -> None:
        assert _records("#1=NOT_IN_ANY_SCHEMA($);")[1].type_names == ("NOT_IN_ANY_SCHEMA",)


# ###############
# Parameter Values
# ###############


class TestParameterValues:
    def test_scalar_values(self) -> None:
        params = _params("#1=A(42,-7,1.5,'s',.T.,#2,$,*,\"0F\");\n#2=B();")
        assert params == (
            IntegerValue(value=42),
            IntegerValue(value=-7),
            RealValue(value=1.5, text="1.5"),
            StringValue(value="s"),
            EnumerationValue(name="T"),
            ReferenceValue(id=2),
            OMITTED,
            REDECLARED,
            BinaryValue(value="0F"),
        )

    def test_real_with_exponent(self) -> None:
        (value,) = _params("#1=A(1.0E+02);")
        assert isinstance(value, RealValue)
        assert value.value == 100.0
        assert value.text == "1.0E+02"

    def test_escaped_quote_in_string(self) -> None:
        assert _params("#1=A('it''s a test');") == (StringValue(value="it's a test"),)

    def test_empty_list(self) -> None:
        assert _params("#1=A(());") == (ListValue(),)

    def test_nested_lists(self) -> None:
        (value,) = _params("#1=A(((1,2),(3)));")
        assert value == ListValue(
            items=(
                ListValue(items=(IntegerValue(value=1), IntegerValue(value=2))),
                ListValue(items=(IntegerValue(value=3),)),
            )
        )

    def test_typed_value(self) -> None:
        (value,) = _params("#1=A(LENGTH_MEASURE(1.E-07));")
        assert value == TypedValue(type_name="LENGTH_MEASURE", inner=RealValue(value=1e-07, text="1.E-07"))

    def test_typed_value_with_list(self) -> None:
        (value,) = _params("#1=A(PARAMETER_VALUE((1,2)));")
        assert isinstance(value, TypedValue)
        assert isinstance(value.inner, ListValue)

    def test_typed_value_with_two_parameters(self) -> None:
        error = _parse_error(_wrap("#1=A(MEASURE(1,2));"))
        assert error.kind == ParseErrorKind.UNEXPECTED_TOKEN

    def test_typed_value_without_parenthesis(self) -> None:
        assert _parse_error(_wrap("#1=A(MEASURE);")).kind == ParseErrorKind.UNEXPECTED_TOKEN

    def test_missing_comma(self) -> None:
        assert _parse_error(_wrap("#1=A(1 2);")).kind == ParseErrorKind.UNEXPECTED_TOKEN

    def test_empty_parameter(self) -> None:
        assert _parse_error(_wrap("#1=A(1,,2);")).kind == ParseErrorKind.UNEXPECTED_TOKEN

    def test_deeply_nested_lists(self) -> None:
        depth = 2000
        (value,) = _params(f"#1=A({'(' * depth}#1{')' * depth});")
        for _ in range(depth):
            assert isinstance(value, ListValue)
            (value,) = value.items
        assert value == ReferenceValue(id=1)

    def test_deeply_nested_typed_values(self) -> None:
        depth = 2000
        (value,) = _params(f"#1=A({'M(' * depth}1{')' * depth});")
        for _ in range(depth):
            assert isinstance(value, TypedValue)
            value = value.inner
        assert value == IntegerValue(value=1)

    def test_list_inside_typed_value_inside_list(self) -> None:
        (value,) = _params("#1=A((1,M((2,())),3));")
        inner = TypedValue(type_name="M", inner=ListValue(items=(IntegerValue(value=2), ListValue())))
        assert value == ListValue(items=(IntegerValue(value=1), inner, IntegerValue(value=3)))


# ###############
# Syntax Errors
# ###############


class TestSyntaxErrors:
    def test_missing_semicolon(self) -> None:
        error = _parse_error(_wrap("#1=A(1)\n#2=B(2);"))
        assert error.kind == ParseErrorKind.MISSING_TERMINATOR
        assert error.line == 7

    def test_unclosed_parenthesis(self) -> None:
        error = _parse_error(_wrap("#1=A((1,2);"))
        assert error.kind == ParseErrorKind.UNBALANCED_PARENS

    def test_extra_closing_parenthesis(self) -> None:
        assert _parse_error(_wrap("#1=A(1));")).kind == ParseErrorKind.UNBALANCED_PARENS

    def test_unclosed_complex_instance(self) -> None:
        assert _parse_error(_wrap("#1=(A(1)B(2);")).kind == ParseErrorKind.UNBALANCED_PARENS

    def test_parenthesis_open_at_end_of_file(self) -> None:
        error = _parse_error("HEADER;\nENDSEC;\nDATA;\n#1=A(1,")
        assert error.kind == ParseErrorKind.UNBALANCED_PARENS

    def test_unclosed_inner_list_reports_its_opening(self) -> None:
        error = _parse_error(_wrap("#1=A(((1);"))
        assert error.kind == ParseErrorKind.UNBALANCED_PARENS
        assert (error.line, error.column) == (6, 6)

    def test_unclosed_typed_value(self) -> None:
        error = _parse_error(_wrap("#1=A(M(1;"))
        assert error.kind == ParseErrorKind.UNBALANCED_PARENS
        assert (error.line, error.column) == (6, 7)

    def test_data_section_without_endsec(self) -> None:
        error = _parse_error("HEADER;\nENDSEC;\nDATA;\n#1=A();\n")
        assert error.kind == ParseErrorKind.MISSING_TERMINATOR

    def test_header_section_running_into_data(self) -> None:
        error = _parse_error("HEADER;\nFILE_SCHEMA(());\nDATA;\nENDSEC;\n")
        assert error.kind == ParseErrorKind.MISSING_TERMINATOR

    def test_missing_equals(self) -> None:
        assert _parse_error(_wrap("#1 A();")).kind == ParseErrorKind.UNEXPECTED_TOKEN

    def test_statement_without_id(self) -> None:
        assert _parse_error(_wrap("A();")).kind == ParseErrorKind.UNEXPECTED_TOKEN

    @pytest.mark.parametrize("data", ["#1=ISO-10303-21(1);", "#1=A(END-ISO-10303-21(1));", "#1=(A()ISO-10303-21());"])
    def test_wrapper_keyword_is_not_a_type_name(self, data: str) -> None:
        assert _parse_error(_wrap(data)).kind == ParseErrorKind.UNEXPECTED_TOKEN

    def test_duplicate_entity_id(self) -> None:
        error = _parse_error(_wrap("#1=A();\n#2=B();\n#1=C();"))
        assert error.kind == ParseErrorKind.DUPLICATE_ENTITY_ID
        assert error.entity_id == 1
        assert error.line == 8
        assert "line 6" in str(error)

    def test_error_message_has_position(self) -> None:
        error = _parse_error(_wrap("#1=A(1 2);"))
        assert str(error).startswith("Line 6, column 8:")

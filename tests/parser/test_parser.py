# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the OSO declaration parser."""

from pathlib import Path

import pytest

from osoquery.model import (
    ArraySize,
    BaseType,
    Direction,
    FloatValue,
    IntValue,
    ShaderRecord,
    StringValue,
    TypeDescriptor,
)
from osoquery.parser import ErrorKind, LexerError, ParseError, ParseOptions, parse, parse_file

# ###############
# Test Helpers
# ###############


def _oso(*lines: str) -> str:
    """Join declaration lines into OSO source text."""
    return "\n".join(lines) + "\n"


def _parse(*lines: str, options: ParseOptions | None = None) -> ShaderRecord:
    return parse(_oso(*lines), options)


def _shader(*param_lines: str) -> ShaderRecord:
    """Parse parameter lines under a generic surface shader header."""
    return _parse('shader surface "test"', *param_lines)


def _error(*lines: str, options: ParseOptions | None = None) -> ParseError:
    with pytest.raises(ParseError) as exc_info:
        _parse(*lines, options=options)
    return exc_info.value


REAL_OSO = """\
OpenShadingLanguage 1.12
# Compiled by oslc 1.12.6
surface plastic\t%meta{string,help,"Simple plastic"}
param\tfloat\tKd\t0.8\t\t%meta{float,min,0} %meta{float,max,1} %read{0,0} %write{2147483647,-1}
param\tcolor\tCs\t1 1 1\t\t%meta{string,label,"Base Color"} %read{1,1} %write{2147483647,-1}
param\tstring\ttexname\t""\t\t%read{2,2} %write{2147483647,-1}
param\tfloat[]\tweights\t0.25 0.75\t\t%read{3,3} %write{2147483647,-1}
param\tnormal\tNn\t0 0 0\t\t%read{4,4} %write{2147483647,-1} %initexpr
oparam\tcolor\tresult\t0 0 0\t\t%read{2147483647,-1} %write{5,5}
oparam\tclosure color\tbsdf\t\t%read{2147483647,-1} %write{6,6}
global\tnormal\tN\t%read{4,4} %write{2147483647,-1}
local\tfloat\t___320_tmp\t%read{5,5} %write{5,5}
const\tfloat\t$const1\t0.5\t\t%read{5,5} %write{2147483647,-1}
temp\tcolor\t$tmp1\t%read{6,6} %write{5,5}
code ___main___
# instruction section: nothing below is read
\tmul\t$tmp1 Cs Kd\t%filename{"plastic.osl"} %line{9} %argrw{"wrr"}
\t@@@ "unterminated
"""


# ###############
# Scenarios
# ###############


class TestScenarios:
    def test_matte_shader(self) -> None:
        record = _parse(
            'shader surface "matte"',
            "param float Kd 0.8",
            'param color Cs 1 1 1 %string label "diffuse color"',
        )
        assert record.name == "matte"
        assert record.shader_type == "surface"
        assert record.param_count() == 2

        kd = record.param_at(0)
        assert kd.name == "Kd"
        assert kd.type == TypeDescriptor(base=BaseType.FLOAT)
        assert kd.default == FloatValue(values=(0.8,))

        cs = record.param_at(1)
        assert cs.name == "Cs"
        assert cs.type == TypeDescriptor(base=BaseType.COLOR)
        assert cs.default == FloatValue(values=(1.0, 1.0, 1.0))
        assert len(cs.metadata) == 1
        label = cs.metadata[0]
        assert label.key == "label"
        assert label.type == TypeDescriptor(base=BaseType.STRING)
        assert label.value == StringValue(values=("diffuse color",))

    def test_parameter_before_shader_line(self) -> None:
        err = _error("param int x 1")
        assert err.kind == ErrorKind.UNEXPECTED_DECLARATION
        assert err.line == 1

    def test_unsized_array_without_default(self) -> None:
        param = _shader("param float[] samples").param_by_name("samples")
        assert param is not None
        assert param.type.array_length == ArraySize(length=0, unsized=True)
        assert param.array_length == 0
        assert param.default is None

    def test_int_with_string_default(self) -> None:
        err = _error('shader surface "s"', 'param int bad "notanint"')
        assert err.kind == ErrorKind.TYPE_MISMATCH
        assert err.line == 2


# ###############
# Properties
# ###############


class TestProperties:
    def test_parsing_is_deterministic(self) -> None:
        assert parse(REAL_OSO, ParseOptions(discard_output_defaults=True)) == parse(
            REAL_OSO, ParseOptions(discard_output_defaults=True)
        )

    @pytest.mark.parametrize(
        ("decl", "count"),
        [
            ("param float[3] f 1 2 3", 3),
            ("param int[2] i 4 5", 2),
            ("param color[2] c 1 0 0 0 1 0", 6),
            ("param point[1] p 1 2 3", 3),
            ("param float[0] empty", 0),
        ],
    )
    def test_fixed_array_default_has_length_times_arity_entries(self, decl: str, count: int) -> None:
        param = _shader(decl).param_at(0)
        if count:
            assert len(param.default.values) == count
        else:
            assert param.default is None

    def test_output_parameter_with_default_is_rejected(self) -> None:
        err = _error('shader surface "s"', "param float a 1", "oparam float out 0")
        assert err.kind == ErrorKind.UNEXPECTED_DECLARATION
        assert err.line == 3

    def test_output_parameter_without_default(self) -> None:
        param = _shader("oparam color result").param_at(0)
        assert param.is_output
        assert param.direction == Direction.OUTPUT
        assert param.default is None

    def test_duplicate_parameter_name(self) -> None:
        err = _error('shader surface "s"', "param float Kd 1", "param color Kd 1 1 1")
        assert err.kind == ErrorKind.DUPLICATE_PARAMETER_NAME
        assert err.line == 3

    def test_duplicate_across_directions(self) -> None:
        err = _error('shader surface "s"', "param float x 1", "oparam float x")
        assert err.kind == ErrorKind.DUPLICATE_PARAMETER_NAME

    def test_color_default_is_exact(self) -> None:
        param = _shader("param color c 0.1 0.2 0.3").param_at(0)
        assert param.default == FloatValue(values=(0.1, 0.2, 0.3))


# ###############
# Header and Shader Declaration
# ###############


class TestShaderDeclaration:
    @pytest.mark.parametrize(
        ("line", "shader_type", "name"),
        [
            ('shader surface "matte"', "surface", "matte"),
            ("shader displacement bumpy", "displacement", "bumpy"),
            ("surface plastic", "surface", "plastic"),
            ("displacement bumps", "displacement", "bumps"),
            ("volume fog", "volume", "fog"),
            ("light spot", "light", "spot"),
            ("shader generic", "shader", "generic"),
            ('shader "quoted"', "shader", "quoted"),
        ],
    )
    def test_shader_forms(self, line: str, shader_type: str, name: str) -> None:
        record = _parse(line)
        assert (record.shader_type, record.name) == (shader_type, name)
        assert record.parameters == ()

    def test_version_line(self) -> None:
        record = _parse("OpenShadingLanguage 1.12", "surface s")
        assert record.version == (1, 12)

    def test_version_is_optional(self) -> None:
        assert _parse("surface s").version is None

    def test_version_after_shader_line(self) -> None:
        err = _error("surface s", "OpenShadingLanguage 1.12")
        assert err.kind == ErrorKind.UNEXPECTED_DECLARATION
        assert err.line == 2

    def test_version_requires_number(self) -> None:
        err = _error("OpenShadingLanguage")
        assert err.kind == ErrorKind.UNEXPECTED_END_OF_INPUT

    def test_duplicate_shader_line(self) -> None:
        err = _error("surface a", "surface b")
        assert err.kind == ErrorKind.UNEXPECTED_DECLARATION
        assert err.line == 2

    def test_shader_without_name(self) -> None:
        assert _error("shader").kind == ErrorKind.UNEXPECTED_END_OF_INPUT

    def test_shader_metadata(self) -> None:
        record = _parse('surface s %meta{string,help,"A test shader"}')
        meta = record.find_metadata("help")
        assert meta is not None
        assert meta.value == StringValue(values=("A test shader",))

    def test_hint_line_before_parameters_attaches_to_shader(self) -> None:
        record = _parse("surface s", '%meta{string,category,"plastic"}')
        assert record.find_metadata("category") is not None

    def test_hint_line_before_shader_line(self) -> None:
        assert _error('%string help "x"').kind == ErrorKind.UNEXPECTED_DECLARATION


# ###############
# Parameters
# ###############


class TestParameters:
    def test_keywords_allowed_as_names(self) -> None:
        record = _shader("param color color 1 1 1", "param float code 0.5")
        assert [p.name for p in record.parameters] == ["color", "code"]

    def test_int_default(self) -> None:
        assert _shader("param int n 3").param_at(0).default == IntValue(values=(3,))

    def test_string_default(self) -> None:
        assert _shader('param string s "tex.png"').param_at(0).default == StringValue(values=("tex.png",))

    def test_matrix_default(self) -> None:
        identity = "1 0 0 0 0 1 0 0 0 0 1 0 0 0 0 1"
        param = _shader(f"param matrix m {identity}").param_at(0)
        assert len(param.default.values) == 16

    def test_unsized_array_with_default(self) -> None:
        param = _shader("param color[] cs 1 0 0 0 1 0").param_at(0)
        assert param.type.array_length == ArraySize(length=2, unsized=True)
        assert param.array_length == 2

    def test_closure_parameter(self) -> None:
        param = _shader("param closure color bsdf").param_at(0)
        assert param.type.is_closure
        assert param.default is None

    def test_closure_with_default(self) -> None:
        assert _error('surface s', "param closure color bsdf 1 1 1").kind == ErrorKind.TYPE_MISMATCH

    def test_struct_parameter(self) -> None:
        param = _shader('param struct Material m %struct{"Material"} %structfields{albedo,roughness}').param_at(0)
        assert param.type.base == BaseType.STRUCT
        assert param.type.struct_name == "Material"
        assert param.struct_fields == ("albedo", "roughness")

    def test_struct_name_from_hint(self) -> None:
        param = _shader('param struct m %struct{"Material"}').param_at(0)
        assert param.type.struct_name == "Material"

    def test_space_hint(self) -> None:
        param = _shader('param point P 0 0 0 %space{"world"}').param_at(0)
        assert param.spaces == ("world",)

    def test_space_hints_accumulate(self) -> None:
        param = _shader('param point[2] P 0 0 0 1 1 1 %space{"world"} %space{"object"}').param_at(0)
        assert param.spaces == ("world", "object")

    def test_default_hint(self) -> None:
        param = _shader("param float Kd %default{0.5}").param_at(0)
        assert param.default == FloatValue(values=(0.5,))

    def test_default_hint_resolves_unsized_array(self) -> None:
        param = _shader("param float[] weights %default{[0.25,0.75]}").param_at(0)
        assert param.default == FloatValue(values=(0.25, 0.75))
        assert param.type.array_length == ArraySize(length=2, unsized=True)

    def test_default_hint_on_following_line(self) -> None:
        param = _shader('param string tex', '%default{"wood.tx"}').param_at(0)
        assert param.default == StringValue(values=("wood.tx",))

    def test_default_hint_is_type_checked(self) -> None:
        assert _error("surface s", 'param int n %default{"three"}').kind == ErrorKind.TYPE_MISMATCH
        assert _error("surface s", "param color c %default{[1,1]}").kind == ErrorKind.ARITY_MISMATCH


    def test_initexpr_drops_default(self) -> None:
        record = _shader("param float f 0 %initexpr", "param float[] arr 1 2 3 %initexpr")
        assert record.param_at(0).default is None
        assert record.param_at(1).default is None
        assert record.param_at(1).type.array_length == ArraySize(length=0, unsized=True)

    def test_hint_line_attaches_to_latest_parameter(self) -> None:
        record = _shader("param float a 1", "param float b 2", '%meta{string,label,"B"}')
        assert record.param_at(0).metadata == ()
        assert record.param_at(1).find_metadata("label") is not None

    def test_duplicate_metadata_keys_kept_in_order(self) -> None:
        param = _shader('param float f 1 %string tag "a" %string tag "b"').param_at(0)
        assert [m.value.values[0] for m in param.metadata_values("tag")] == ["a", "b"]
        assert param.find_metadata("tag").value == StringValue(values=("a",))

    def test_unknown_type(self) -> None:
        assert _error("surface s", "param texture t").kind == ErrorKind.UNKNOWN_TYPE

    @pytest.mark.parametrize("decl", ["param float[-1] x", "param float[n] x"])
    def test_invalid_array_size(self, decl: str) -> None:
        assert _error("surface s", decl).kind == ErrorKind.INVALID_ARRAY_SIZE

    def test_arity_mismatch(self) -> None:
        assert _error("surface s", "param color c 1 1").kind == ErrorKind.ARITY_MISMATCH

    @pytest.mark.parametrize("decl", ["param", "param float", "param float[3"])
    def test_truncated_declaration(self, decl: str) -> None:
        assert _error("surface s", decl).kind == ErrorKind.UNEXPECTED_END_OF_INPUT

    def test_unknown_metadata_type(self) -> None:
        assert _error("surface s", "param float f 1 %texture t 1").kind == ErrorKind.UNKNOWN_TYPE

    def test_error_location(self) -> None:
        err = _error("surface s", "param float Kd abc")
        assert err.kind == ErrorKind.TYPE_MISMATCH
        assert (err.line, err.column) == (2, 16)
        assert str(err).startswith("Line 2, column 16:")


# ###############
# Output Defaults
# ###############


class TestOutputDefaults:
    def test_discarded_when_enabled(self) -> None:
        record = _parse(
            'shader surface "s"',
            "oparam color result 0 0 0",
            options=ParseOptions(discard_output_defaults=True),
        )
        param = record.param_at(0)
        assert param.is_output
        assert param.default is None

    def test_discarded_values_are_still_type_checked(self) -> None:
        err = _error(
            'shader surface "s"',
            'oparam color result "black"',
            options=ParseOptions(discard_output_defaults=True),
        )
        assert err.kind == ErrorKind.TYPE_MISMATCH

    def test_default_hint_rejected_by_default(self) -> None:
        err = _error('shader surface "s"', "oparam float r %default{1}")
        assert err.kind == ErrorKind.UNEXPECTED_DECLARATION

    def test_default_hint_discarded_when_enabled(self) -> None:
        record = _parse(
            'shader surface "s"',
            "oparam float r %default{1}",
            options=ParseOptions(discard_output_defaults=True),
        )
        assert record.param_at(0).default is None


# ###############
# Document Structure
# ###############


class TestDocumentStructure:
    @pytest.mark.parametrize("source", ["", "\n\n", "# only a comment\n", "OpenShadingLanguage 1.12\n"])
    def test_no_shader_line(self, source: str) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse(source)
        assert exc_info.value.kind == ErrorKind.UNEXPECTED_END_OF_INPUT

    def test_code_section_is_not_read(self) -> None:
        record = _parse("surface s", "param float f 1", "code ___main___", '@@@ "unterminated')
        assert record.param_count() == 1

    def test_symbol_lines_are_skipped(self) -> None:
        record = _shader(
            "param float f 1",
            "local float tmp %read{0,0}",
            "temp int $tmp1",
            "const float $const1 0.5",
            "global point P",
        )
        assert [p.name for p in record.parameters] == ["f"]

    def test_hint_line_after_symbol_line_attaches_to_shader(self) -> None:
        record = _shader("param float Kd 0.5", "local float x", '%meta{string,help,"h"}')
        assert record.param_at(0).metadata == ()
        assert record.find_metadata("help").value == StringValue(values=("h",))

    def test_unknown_escape_in_symbol_line(self) -> None:
        record = _shader("param float Kd 0.5", r'const string $c "a\qb"', "code ___main___")
        assert [p.name for p in record.parameters] == ["Kd"]

    def test_unexpected_leading_token(self) -> None:
        err = _error("surface s", "instance foo")
        assert err.kind == ErrorKind.UNEXPECTED_DECLARATION
        assert err.line == 2

    def test_trailing_garbage_after_name(self) -> None:
        assert _error("surface s", "param float f 1 ]").kind == ErrorKind.TYPE_MISMATCH

    def test_lexer_error_propagates(self) -> None:
        with pytest.raises(LexerError) as exc_info:
            _parse("surface s", 'param string s "abc')
        assert exc_info.value.kind == ErrorKind.MALFORMED_TOKEN
        assert exc_info.value.line == 2

    def test_bytes_input(self) -> None:
        record = parse(b"# \xff\xfe\nsurface s\nparam float f 1\n")
        assert record.name == "s"

    def test_real_compiler_output(self) -> None:
        record = parse(REAL_OSO, ParseOptions(discard_output_defaults=True))
        assert record.version == (1, 12)
        assert (record.shader_type, record.name) == ("surface", "plastic")
        assert record.find_metadata("help").value == StringValue(values=("Simple plastic",))
        assert [p.name for p in record.parameters] == ["Kd", "Cs", "texname", "weights", "Nn", "result", "bsdf"]

        kd = record.param_by_name("Kd")
        assert [m.key for m in kd.metadata] == ["min", "max"]
        assert record.param_by_name("Cs").find_metadata("label").value == StringValue(values=("Base Color",))
        assert record.param_by_name("texname").default == StringValue(values=("",))
        assert record.param_by_name("weights").array_length == 2
        assert record.param_by_name("Nn").default is None
        assert [p.name for p in record.output_params()] == ["result", "bsdf"]
        assert record.param_by_name("bsdf").type.is_closure

    def test_real_compiler_output_is_strict_by_default(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse(REAL_OSO)
        assert exc_info.value.kind == ErrorKind.UNEXPECTED_DECLARATION
        assert exc_info.value.line == 9


# ###############
# Files
# ###############


class TestParseFile:
    def test_parse_file(self, tmp_path: Path) -> None:
        path = tmp_path / "plastic.oso"
        path.write_text(REAL_OSO, encoding="utf-8")
        record = parse_file(path, ParseOptions(discard_output_defaults=True))
        assert record.name == "plastic"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            parse_file(tmp_path / "missing.oso")

"""Tests for directive and LaTeX fragment validation."""

from __future__ import annotations

from pathlib import Path

from commitguard.fragments import FragmentExtractor, FragmentValidator
from commitguard.models import CheckStatus
from commitguard.tools import LatexCompiler, SpellChecker, XmlLinter
from commitguard.vocabulary import Vocabulary
from tests._fixtures.fakes import FakeProcessRunner

DIRECTIVE = """\
program halo
  !![
  <inputParameter>
    <name>mass</name>
    <description>The mass of the halo, $M_\\mathrm{vir}$.</description>
  </inputParameter>
  !!]
end program halo
"""


def _validator(runner: FakeProcessRunner, **kwargs) -> FragmentValidator:  # type: ignore[no-untyped-def]
    return FragmentValidator(compiler=LatexCompiler(runner), xml_linter=XmlLinter(runner), **kwargs)


def _validate(source: str, validator: FragmentValidator, path: str = "halo.F90"):  # type: ignore[no-untyped-def]
    return validator.validate(FragmentExtractor().extract(source, path))


def test_malformed_directive_reports_file_and_line(fake_runner: FakeProcessRunner) -> None:
    source = "program bad\n!! [\n<inputParameter>\n  <name>mass</name>\n</outputParameter>\n!!]\nend program bad\n"

    results = _validate(source, _validator(fake_runner), "source/bad.F90")

    [result] = results
    assert result.status is CheckStatus.FAIL
    assert result.message == "source/bad.F90:5: XML parse error in <inputParameter> directive"
    assert "mismatched tag" in result.diagnostic
    assert fake_runner.calls == []


def test_valid_directive_compiles_its_description(fake_runner: FakeProcessRunner) -> None:
    results = _validate(DIRECTIVE, _validator(fake_runner))

    [result] = results
    assert result.status is CheckStatus.PASS
    assert result.message == "halo.F90: 1 directive(s) and 0 LaTeX block(s) valid"
    [command] = fake_runner.commands("pdflatex")
    tex_source = Path(command[-1])
    assert tex_source.suffix == ".tex"
    assert not tex_source.exists()


def test_description_compile_failure_is_reported(fake_runner: FakeProcessRunner) -> None:
    fake_runner.responses["pdflatex"] = (1, "! Missing $ inserted.\n<inserted text>\n", "")

    [result] = _validate(DIRECTIVE, _validator(fake_runner))

    assert result.status is CheckStatus.FAIL
    assert result.message == "halo.F90:3: <inputParameter> description failed to compile"
    assert result.diagnostic.startswith("! Missing $ inserted.")


def test_directive_checked_against_matching_schema(fake_runner: FakeProcessRunner, tmp_path: Path) -> None:
    schema_dir = tmp_path / "schema"
    schema_dir.mkdir()
    (schema_dir / "inputParameter.xsd").write_text("<xs:schema/>", encoding="utf-8")
    fake_runner.responses["xmllint"] = lambda args, **_: (
        3,
        "",
        f"{args[-1]}:2: element name: Schemas validity error : Element 'name': not expected.",
    )

    [result] = _validate(DIRECTIVE, _validator(fake_runner, schema_dir=schema_dir))

    assert result.status is CheckStatus.FAIL
    assert result.message == "halo.F90:3: <inputParameter> directive does not match inputParameter.xsd"
    assert result.diagnostic.startswith("halo.F90:2: element name")
    [command] = fake_runner.commands("xmllint")
    assert command[1:4] == ["--noout", "--schema", str(schema_dir / "inputParameter.xsd")]
    assert not Path(command[-1]).exists()
    assert fake_runner.commands("pdflatex") == []


def test_directive_without_schema_file_skips_xmllint(fake_runner: FakeProcessRunner, tmp_path: Path) -> None:
    results = _validate(DIRECTIVE, _validator(fake_runner, schema_dir=tmp_path))

    assert results[-1].status is CheckStatus.PASS
    assert fake_runner.commands("xmllint") == []


def test_latex_block_misspellings_are_warnings(fake_runner: FakeProcessRunner) -> None:
    fake_runner.responses["hunspell"] = (0, "teh\n", "")
    validator = _validator(fake_runner, spell_checker=SpellChecker(fake_runner))
    source = "!!{\nCompute teh mass of teh halo.\n!!}\n"

    warning, summary = _validate(source, validator, "mass.F90")

    assert warning.status is CheckStatus.WARN
    assert warning.name == "spelling"
    assert warning.message == "mass.F90:1: possible misspellings in LaTeX block"
    assert warning.diagnostic == "teh (2)"
    assert summary.message == "mass.F90: 0 directive(s) and 1 LaTeX block(s) valid"


def test_vocabulary_words_are_not_sent_to_hunspell(fake_runner: FakeProcessRunner) -> None:
    validator = _validator(
        fake_runner,
        spell_checker=SpellChecker(fake_runner),
        vocabulary=Vocabulary(frozenset({"Galacticus"})),
    )

    _validate("!!{\nGalacticus halo\n!!}\n", validator)

    [call] = [call for call in fake_runner.calls if call["args"][0] == "hunspell"]
    assert call["input"] == "halo\n"


def test_spell_checker_failure_does_not_fail_validation(fake_runner: FakeProcessRunner) -> None:
    fake_runner.responses["hunspell"] = (1, "", "Can't open affix or dictionary files")
    validator = _validator(fake_runner, spell_checker=SpellChecker(fake_runner))

    results = _validate("!!{\nPlain words.\n!!}\n", validator)

    assert [result.status for result in results] == [CheckStatus.PASS]


def test_structural_problem_fails_before_any_tool_runs(fake_runner: FakeProcessRunner) -> None:
    [result] = _validate("x = 1\n!!{\nnever closed\n", _validator(fake_runner), "open.F90")

    assert result.status is CheckStatus.FAIL
    assert result.message == "open.F90:3: LaTeX block opened at line 2 is never closed"
    assert fake_runner.calls == []


def test_file_without_fragments_yields_nothing(fake_runner: FakeProcessRunner) -> None:
    assert _validate("x = 1\n! comment\n", _validator(fake_runner)) == []

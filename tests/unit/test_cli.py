import io
import json
import sys

import pytest
from rich.console import Console

from tessel import cli
from tessel.cli import CLIApplication, resolve_class, run_main
from tessel.config import TesselSettings


MODULE_NAME = "tessel_cli_samples"

MODULE_SOURCE = '''
import time

import tessel


class Passing:
    @tessel.test
    def works(self):
        pass


class Failing:
    @tessel.test
    def breaks(self):
        raise AssertionError("broken on purpose")

    @tessel.test
    def works(self):
        pass


class Sleepy:
    @tessel.test
    def naps(self):
        time.sleep(0.5)


class Outer:
    class Inner:
        @tessel.test
        def nested(self):
            pass
'''


@pytest.fixture(autouse=True)
def sample_module(tmp_path, monkeypatch):
    (tmp_path / f"{MODULE_NAME}.py").write_text(MODULE_SOURCE)
    monkeypatch.syspath_prepend(str(tmp_path))
    for name in ("DEFAULT_TIMEOUT", "VERBOSITY", "TRACE", "TRACE_OUTPUT"):
        monkeypatch.delenv(f"TESSEL_{name}", raising=False)
    yield
    sys.modules.pop(MODULE_NAME, None)


def make_app():
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)
    return CLIApplication(console=console, settings=TesselSettings()), buffer


def test_resolve_dotted_and_colon_names():
    dotted = resolve_class(f"{MODULE_NAME}.Passing")
    colon = resolve_class(f"{MODULE_NAME}:Passing")
    assert dotted is colon
    assert dotted.__name__ == "Passing"


def test_resolve_nested_class():
    assert resolve_class(f"{MODULE_NAME}:Outer.Inner").__qualname__ == "Outer.Inner"


@pytest.mark.parametrize(
    "name",
    ["no_such_module_anywhere.Thing", f"{MODULE_NAME}.Missing", "Bare"],
)
def test_resolve_unknown_class(name):
    with pytest.raises(ImportError, match=f"Could not find class: {name}"):
        resolve_class(name)


def test_resolve_non_class():
    with pytest.raises(ImportError, match="is not a class"):
        resolve_class(f"{MODULE_NAME}.time")


def test_exit_code_zero_when_all_pass():
    app, buffer = make_app()
    assert app.run([f"{MODULE_NAME}.Passing"]) == 0
    assert "OK (1 tests)" in buffer.getvalue()


def test_exit_code_one_on_failure():
    app, buffer = make_app()
    assert app.run([f"{MODULE_NAME}.Passing", f"{MODULE_NAME}.Failing"]) == 1
    output = buffer.getvalue()
    assert "broken on purpose" in output
    assert "Tests run: 3,  Failures: 1" in output


def test_unknown_class_reported_as_failure():
    app, buffer = make_app()
    assert app.run(["nowhere.Nothing", f"{MODULE_NAME}.Passing"]) == 1
    output = buffer.getvalue()
    assert "Could not find class: nowhere.Nothing" in output
    assert "Tests run: 2,  Failures: 1" in output


def test_single_method_selector():
    result = run_main([f"{MODULE_NAME}.Failing#works"], console=Console(file=io.StringIO()))
    assert result.run_count == 1
    assert result.was_successful


def test_unknown_method_selector():
    result = run_main([f"{MODULE_NAME}.Failing#missing"], console=Console(file=io.StringIO()))
    (failure,) = result.failures
    assert "No tests found matching Method missing(Failing)" in failure.message


def test_name_filter_option():
    result = run_main([f"{MODULE_NAME}.Failing", "-k", "works"], console=Console(file=io.StringIO()))
    assert result.run_count == 1
    assert result.was_successful


def test_timeout_option():
    result = run_main([f"{MODULE_NAME}.Sleepy", "--timeout", "0.05"], console=Console(file=io.StringIO()))
    (failure,) = result.failures
    assert failure.message == "test timed out after 0.05 seconds"


@pytest.mark.parametrize("value", ["0", "-1", "soon"])
def test_timeout_option_rejects_non_positive(value, capsys):
    app, _ = make_app()
    with pytest.raises(SystemExit) as exc_info:
        app.run([f"{MODULE_NAME}.Passing", "--timeout", value])
    assert exc_info.value.code == 2
    assert "--timeout" in capsys.readouterr().err


def test_timeout_from_settings():
    app, _ = make_app()
    app.settings = TesselSettings(default_timeout=0.05)
    assert app.run([f"{MODULE_NAME}.Sleepy"]) == 1


def test_verbose_output():
    app, buffer = make_app()
    app.run([f"{MODULE_NAME}.Passing", "-v"])
    assert "✓ works(Passing)" in buffer.getvalue()


def test_trace_option_writes_spans(tmp_path):
    output = tmp_path / "spans.jsonl"
    app, buffer = make_app()
    assert app.run([f"{MODULE_NAME}.Passing", "--trace", "--trace-output", str(output)]) == 0
    names = [json.loads(line)["name"] for line in output.read_text().splitlines()]
    assert "test.works(Passing)" in names
    assert f"Tracing written to {output}" in buffer.getvalue().replace("\n", "")


def test_main_exits_with_code(monkeypatch):
    captured = {}

    class FakeApplication:
        def run(self, argv):
            captured["argv"] = argv
            return 1

    monkeypatch.setattr(cli, "CLIApplication", FakeApplication)
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["some.Class"])
    assert exc_info.value.code == 1
    assert captured["argv"] == ["some.Class"]

import pytest

from evie import cli
from evie.engine import EVIE


@pytest.fixture
def engine(dataset):
    return EVIE(records=list(dataset))


def test_stats(engine, capsys):
    engine.set_filter("make", ["NISSAN"])
    cli.handle(engine, "stats")
    out = capsys.readouterr().out
    assert "Total EVs: 2 (2017 - 2021)" in out
    assert "5 models | 3 makes" in out


def test_filter_and_clear(engine, capsys):
    cli.handle(engine, 'filter make TESLA NISSAN')
    assert "Size=5" in capsys.readouterr().out
    cli.handle(engine, "filter range 100 -")
    assert engine.state.criteria.range.min == 100
    assert engine.state.criteria.range.max is None
    cli.handle(engine, "clear")
    assert "Size=6" in capsys.readouterr().out


def test_search_with_quotes(engine, capsys):
    cli.handle(engine, 'search "model 3"')
    assert "Size=1" in capsys.readouterr().out


def test_sort_and_page(engine, capsys):
    cli.handle(engine, "sort City desc")
    out = capsys.readouterr().out
    assert out.splitlines()[1].endswith("Tacoma, Pierce")
    cli.handle(engine, "page 2 5")
    out = capsys.readouterr().out
    assert out.startswith("Page 2/2")


def test_chart_commands(engine, capsys):
    cli.handle(engine, "makes")
    assert capsys.readouterr().out.splitlines()[0].startswith("TESLA")
    cli.handle(engine, "growth")
    assert "2017" in capsys.readouterr().out
    cli.handle(engine, "highlights")
    assert "Latest average range (2021)" in capsys.readouterr().out


def test_export(engine, tmp_path, capsys):
    out = tmp_path / "sub.csv"
    cli.handle(engine, f'export "{out}"')
    assert out.exists()
    assert "Exported 6 rows" in capsys.readouterr().out


def test_reload_failure_message(engine, tmp_path, capsys):
    engine.dataset_path = str(tmp_path / "gone.csv")
    cli.handle(engine, "reload")
    assert "Reload failed" in capsys.readouterr().out
    assert len(engine.records) == 6


def test_unknown_filter_kind_raises(engine):
    with pytest.raises(ValueError):
        cli.handle(engine, "filter color red")


def test_main_runs_repl(tmp_path, monkeypatch, capsys):
    p = tmp_path / "ev.csv"
    p.write_text("Make,Model,Model Year,Electric Range\nTESLA,MODEL 3,2020,266\n", encoding="utf-8")
    commands = iter(["stats", "sort VIN", "quit"])
    monkeypatch.setattr("builtins.input", lambda _prompt: next(commands))
    cli.main(["--csv", str(p)])
    out = capsys.readouterr().out
    assert "Loaded 1 vehicles" in out
    assert "Total EVs: 1" in out
    assert "Error: Unknown field 'VIN'" in out


def test_filter_range_open_lower_bound(engine, capsys):
    cli.handle(engine, "filter range - 150")
    assert engine.state.criteria.range.min is None
    assert engine.state.criteria.range.max == 150
    assert "Size=4" in capsys.readouterr().out


def test_export_to_missing_directory_keeps_repl_alive(tmp_path, monkeypatch, capsys):
    p = tmp_path / "ev.csv"
    p.write_text("Make,Model,Model Year,Electric Range\nTESLA,MODEL 3,2020,266\n", encoding="utf-8")
    commands = iter([f'export "{tmp_path / "nope" / "x.csv"}"', "stats", "quit"])
    monkeypatch.setattr("builtins.input", lambda _prompt: next(commands))
    cli.main(["--csv", str(p)])
    out = capsys.readouterr().out
    assert "Error:" in out
    assert "Total EVs: 1" in out


def test_page_size_outside_options_is_rejected(engine):
    with pytest.raises(ValueError):
        cli.handle(engine, "page 1 7")

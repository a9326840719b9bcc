import pandas as pd

from early_r.runner import main, parse_date_list, parse_int_list

INCIDENCE = "1,0,1,0,0,0,1,1,0,2,1,1," + ",".join(["0"] * 34)


def test_parse_lists():
    assert parse_int_list("1, 2;3 4") == [1, 2, 3, 4]
    assert parse_int_list("") == []
    assert parse_date_list("2024-01-01,2024-01-03") == ["2024-01-01", "2024-01-03"]


def test_estimate_command(capsys):
    assert main(["estimate", "--incidence", INCIDENCE]) == 0
    out = capsys.readouterr().out
    assert "REstimateResult" in out
    assert "R_ml =" in out


def test_estimate_from_onsets(capsys):
    rc = main(["estimate", "--onsets", "2024-01-01,2024-01-03,2024-01-07", "--last-date", "2024-02-15",
               "--r-max", "10", "--grid-step", "0.05"])
    assert rc == 0
    assert "R_ml =" in capsys.readouterr().out


def test_invalid_input_is_reported(capsys):
    assert main(["estimate", "--incidence", "1,-1,2"]) == 2
    err = capsys.readouterr().err
    assert "must be >= 0" in err


def test_invalid_serial_interval_is_reported(capsys):
    assert main(["estimate", "--incidence", INCIDENCE, "--si-mean", "0"]) == 2
    assert "serial interval mean" in capsys.readouterr().err


def test_sample_command_writes_csv(tmp_path, capsys):
    out = tmp_path / "R.csv"
    assert main(["sample", "--incidence", INCIDENCE, "-N", "300", "--seed", "3", "--out", str(out)]) == 0
    df = pd.read_csv(out)
    assert list(df.columns) == ["draw", "R"]
    assert len(df) == 300
    assert "mean" in capsys.readouterr().out


def test_sample_zero_draws_is_reported(capsys):
    assert main(["sample", "--incidence", INCIDENCE, "-N", "0"]) == 2
    assert "n must be > 0" in capsys.readouterr().err


def test_project_command(tmp_path, capsys):
    out = tmp_path / "proj.csv"
    rc = main(["project", "--incidence", INCIDENCE, "--n-days", "5", "--n-sim", "20", "--n-r", "50",
               "--seed", "1", "--model", "negbin", "--size", "1.0", "--out", str(out)])
    assert rc == 0
    assert len(pd.read_csv(out)) == 20
    assert "median" in capsys.readouterr().out


def test_plot_command(tmp_path):
    out = tmp_path / "R.png"
    assert main(["plot", "--incidence", INCIDENCE, "--out", str(out)]) == 0
    assert out.exists()


def test_project_command_with_plot(tmp_path, capsys):
    png = tmp_path / "figs" / "proj.png"
    rc = main(["project", "--incidence", INCIDENCE, "--n-days", "5", "--n-sim", "20", "--n-r", "50",
               "--seed", "1", "--plot", str(png)])
    assert rc == 0
    assert png.exists() and png.stat().st_size > 0
    assert "Projection plot ->" in capsys.readouterr().out


def test_last_date_with_incidence_is_rejected(capsys):
    assert main(["estimate", "--incidence", INCIDENCE, "--last-date", "2024-02-01"]) == 2
    assert "--last-date only applies to --onsets" in capsys.readouterr().err

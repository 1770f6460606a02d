import pytest

from assetpick import menu_assets
from assetpick.resolve.interfaces import Arch, Platform, RuntimeContext
from assetpick.resolve.scoring import parse_assets

pytestmark = [pytest.mark.unit, pytest.mark.cli]

MAC_ARM64 = RuntimeContext(Platform.MACOS, Arch.ARM64)


@pytest.fixture
def ranked(make_artifacts):
    artifacts = make_artifacts(
        "app-windows-x64.zip", "app-macos-x64.dmg", "app-macos-arm64.dmg"
    )
    return parse_assets(artifacts, MAC_ARM64)


def test_describe_candidate_labels(ranked):
    recommended, emulated, rejected = ranked
    assert menu_assets.describe_candidate(recommended) == (
        "app-macos-arm64.dmg  [macOS ARM64]  3.00 KB  score 157  (recommended)"
    )
    assert menu_assets.describe_candidate(emulated).endswith("score 87  (emulated)")
    assert menu_assets.describe_candidate(rejected).endswith("score 0  (incompatible)")


def test_describe_unclassified(make_artifacts):
    candidate = parse_assets(make_artifacts("tool.tar.gz"), MAC_ARM64)[0]
    assert menu_assets.describe_candidate(candidate) == "tool.tar.gz  1.00 KB  score 25"


def test_select_artifact_returns_picked(mocker, ranked):
    mock_pick = mocker.patch("assetpick.menu_assets.pick", return_value=("ignored", 1))

    chosen = menu_assets.select_artifact(ranked)

    assert chosen.name == "app-macos-x64.dmg"
    options, title = mock_pick.call_args.args
    assert options[0].startswith("app-macos-arm64.dmg")
    assert "Select an artifact" in title
    assert mock_pick.call_args.kwargs["indicator"] == "*"


def test_select_artifact_empty(mocker, capsys):
    mock_pick = mocker.patch("assetpick.menu_assets.pick")
    assert menu_assets.select_artifact([]) is None
    mock_pick.assert_not_called()
    assert "No installable artifacts" in capsys.readouterr().out


def test_run_menu_logs_failures(mocker, ranked):
    mocker.patch("assetpick.menu_assets.pick", side_effect=KeyboardInterrupt)
    with pytest.raises(KeyboardInterrupt):
        menu_assets.run_menu(ranked)

    mocker.patch("assetpick.menu_assets.pick", side_effect=RuntimeError("no tty"))
    mock_logger = mocker.patch("assetpick.menu_assets.logger")
    assert menu_assets.run_menu(ranked) is None
    mock_logger.exception.assert_called_once()

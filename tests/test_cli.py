"""Tests for the rocketcart command-line tool"""
import json
from unittest.mock import patch

import pytest

from rocketcart.cli import build_parser, main


@pytest.fixture
def cart_file(tmp_path):
    return tmp_path / "cart.json"


@pytest.fixture
def run_cli(inventory, cart_file):
    """Run main() against the in-memory inventory and a temp cart file"""
    def runner(*argv):
        with patch("rocketcart.cli.HttpInventoryGateway", return_value=inventory):
            return main(["--storage", "file", "--path", str(cart_file), "--lang", "en", *argv])
    return runner


def test_parser_commands():
    parser = build_parser()

    args = parser.parse_args(["set", "3", "2"])
    assert (args.command, args.product_id, args.amount) == ("set", 3, 2)

    with pytest.raises(SystemExit):
        parser.parse_args(["add", "not-a-number"])


def test_show_empty_cart(run_cli, capsys):
    assert run_cli("show") == 0

    assert "Cart: 0 items" in capsys.readouterr().out


def test_add_then_show(run_cli, cart_file, capsys):
    assert run_cli("add", "1") == 0
    assert run_cli("add", "1") == 0
    assert run_cli("add", "2") == 0

    stored = json.loads(cart_file.read_text(encoding="utf-8"))
    assert [(i["id"], i["amount"]) for i in stored] == [(1, 2), (2, 1)]

    capsys.readouterr()
    assert run_cli("show") == 0
    assert "Cart: 2 items" in capsys.readouterr().out


def test_single_item_label(run_cli, capsys):
    run_cli("add", "3")

    assert "Cart: 1 item\n" in capsys.readouterr().out


def test_failed_operation_exit_code(run_cli, capsys):
    assert run_cli("remove", "1") == 1

    assert "Product removal failed" in capsys.readouterr().err


def test_set_below_floor_is_success(run_cli):
    run_cli("add", "1")

    assert run_cli("set", "1", "0") == 0


def test_check_reports_overstocked_lines(run_cli, inventory, capsys):
    run_cli("add", "1")
    run_cli("set", "1", "4")
    inventory.set_stock(1, 2)
    capsys.readouterr()

    assert run_cli("check") == 1
    assert "#1: only 2 in stock" in capsys.readouterr().out


def test_main_loads_dotenv(run_cli):
    with patch("rocketcart.cli.load_dotenv") as mock_load_dotenv:
        assert run_cli("show") == 0

    mock_load_dotenv.assert_called_once_with()


def test_options_default_to_environment(inventory, tmp_path, monkeypatch, capsys):
    cart_file = tmp_path / "env-cart.json"
    monkeypatch.setenv("CART_STORAGE_BACKEND", "file")
    monkeypatch.setenv("CART_STORAGE_PATH", str(cart_file))
    monkeypatch.setenv("NOTIFY_LANGUAGE", "pt")

    with patch("rocketcart.cli.HttpInventoryGateway", return_value=inventory):
        assert main(["add", "1"]) == 0
        assert main(["remove", "9"]) == 1

    assert json.loads(cart_file.read_text(encoding="utf-8"))[0]["id"] == 1
    assert "Erro na remoção do produto" in capsys.readouterr().err


def test_unknown_backend_in_environment_is_usage_error(monkeypatch, capsys):
    monkeypatch.setenv("CART_STORAGE_BACKEND", "sqlite")

    with patch("rocketcart.cli.HttpInventoryGateway") as gateway_cls:
        with pytest.raises(SystemExit) as exc_info:
            main(["show"])

    assert exc_info.value.code == 2
    assert "CART_STORAGE_BACKEND" in capsys.readouterr().err
    gateway_cls.assert_not_called()


def test_storage_option_overrides_bad_environment(run_cli, monkeypatch):
    monkeypatch.setenv("CART_STORAGE_BACKEND", "sqlite")

    assert run_cli("show") == 0


@pytest.mark.parametrize(
    "name, value, argv",
    [
        ("CART_TTL", "ten", ["--storage", "redis", "show"]),
        ("CART_TTL", "-1", ["--storage", "redis", "show"]),
        ("INVENTORY_TIMEOUT", "soon", ["--storage", "memory", "show"]),
    ],
)
def test_invalid_setting_is_usage_error(monkeypatch, capsys, name, value, argv):
    monkeypatch.setenv(name, value)

    with pytest.raises(SystemExit) as exc_info:
        main(argv)

    assert exc_info.value.code == 2
    assert name in capsys.readouterr().err

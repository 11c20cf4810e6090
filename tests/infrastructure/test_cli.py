"""Tests for the click CLI, run against a temporary JSON data directory."""

import pytest
from click.testing import CliRunner

from storefront.domain.model.cart import CartLine
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.model.wallet import WalletAccount
from storefront.infrastructure.cli.main import cli
from tests.fakes import seed_json_store


@pytest.fixture
def runner(tmp_path, monkeypatch) -> CliRunner:
    monkeypatch.setenv("STOREFRONT_DATA_DIR", str(tmp_path))
    seed_json_store(
        tmp_path,
        products=[
            Product(id="p1", name="Widget", price=Money.of("20.00"), stock_quantity=5),
            Product(id="p2", name="Gadget", price=Money.of("5.00"), stock_quantity=0),
        ],
        carts=[CartLine("u1", "p1", 1)],
        wallets=[WalletAccount("u1", Money.of("100.00"))],
    )
    return CliRunner()


class TestProductCommands:

    def test_list(self, runner):
        result = runner.invoke(cli, ["product", "list"])
        assert result.exit_code == 0
        assert "Widget" in result.output
        assert "(not for sale)" in result.output

    def test_restock(self, runner):
        result = runner.invoke(cli, ["product", "restock", "--id", "p2", "--quantity", "4"])
        assert result.exit_code == 0
        assert "now has 4 in stock" in result.output


class TestCartCommands:

    def test_add_and_show(self, runner):
        result = runner.invoke(cli, ["cart", "add", "--user", "u1", "--product", "p1", "--quantity", "2"])
        assert result.exit_code == 0
        assert "p1 x3" in result.output

        result = runner.invoke(cli, ["cart", "show", "--user", "u1"])
        assert "Widget" in result.output

    def test_add_out_of_stock(self, runner):
        result = runner.invoke(cli, ["cart", "add", "--user", "u1", "--product", "p2"])
        assert result.exit_code == 1
        assert "out of stock" in result.output


class TestCheckoutCommands:

    def test_preview(self, runner):
        result = runner.invoke(cli, ["checkout", "preview", "--user", "u1"])
        assert result.exit_code == 0
        assert "$31.59" in result.output
        assert "Wallet balance: $100.00" in result.output

    def test_place_with_wallet_then_show(self, runner):
        result = runner.invoke(
            cli,
            ["checkout", "place", "--user", "u1", "--payment", "wallet", "--shipping-address", "1"],
        )
        assert result.exit_code == 0, result.output
        assert "payment=paid" in result.output

        result = runner.invoke(cli, ["order", "show", "--id", "1"])
        assert "$31.59" in result.output

        result = runner.invoke(cli, ["wallet", "show", "--user", "u1"])
        assert "$68.41" in result.output

    def test_place_with_unknown_method(self, runner):
        result = runner.invoke(
            cli,
            ["checkout", "place", "--user", "u1", "--payment", "bitcoin", "--shipping-address", "1"],
        )
        assert result.exit_code == 1
        assert "Unknown payment method" in result.output

    def test_bad_items_format(self, runner):
        result = runner.invoke(
            cli,
            ["checkout", "place", "--user", "u1", "--payment", "cod",
             "--shipping-address", "1", "--items", "p1"],
        )
        assert result.exit_code == 2
        assert "Expected 'ProductId:Quantity'" in result.output


class TestOrderCommands:

    def test_cancel_restocks(self, runner):
        runner.invoke(
            cli, ["checkout", "place", "--user", "u1", "--payment", "cod", "--shipping-address", "1"]
        )
        result = runner.invoke(cli, ["order", "cancel", "--id", "1"])
        assert result.exit_code == 0
        assert "cancelled" in result.output

        result = runner.invoke(cli, ["product", "list"])
        assert " 5 " in result.output

    def test_expire_pending_with_nothing_stale(self, runner):
        result = runner.invoke(cli, ["order", "expire-pending"])
        assert result.exit_code == 0
        assert "No stale pending orders." in result.output

    def test_show_unknown_order(self, runner):
        result = runner.invoke(cli, ["order", "show", "--id", "99"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestWalletCommands:

    def test_top_up(self, runner):
        result = runner.invoke(cli, ["wallet", "top-up", "--user", "u9", "--amount", "12.00"])
        assert result.exit_code == 0
        assert "balance $12.00" in result.output

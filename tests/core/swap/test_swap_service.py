import pytest

from app.cache import TTLCache
from app.core.swap import SwapService
from app.services.price_oracle import PriceOracle


class OfflineCoingecko:
    async def get_token_prices(self, ids):
        raise RuntimeError("offline")


@pytest.fixture
def service():
    return SwapService(price_oracle=PriceOracle(provider=OfflineCoingecko(), cache=TTLCache()))


def _intent(**overrides):
    intent = {"action": "swap", "amount": "1", "fromToken": "SOL", "toToken": "USDC"}
    intent.update(overrides)
    return intent


def test_valid_without_wallet_data(service):
    assert service.validate_swap_request(_intent()).valid


def test_rejects_unsupported_token(service):
    result = service.validate_swap_request(_intent(toToken="DOGE"))

    assert not result.valid
    assert result.reason == "Unsupported token: DOGE"


def test_rejects_same_token(service):
    result = service.validate_swap_request(_intent(toToken="sol"))

    assert result.reason == "Cannot swap a token for itself"


@pytest.mark.parametrize("amount", ["0", "-1", "abc", None])
def test_rejects_bad_amount(service, amount):
    assert not service.validate_swap_request(_intent(amount=amount)).valid


def test_sol_balance_must_cover_fee(service):
    result = service.validate_swap_request(_intent(amount="1"), {"solBalance": 1})

    assert not result.valid
    assert "Insufficient SOL balance" in result.reason

    assert service.validate_swap_request(_intent(amount="0.5"), {"solBalance": 1}).valid


def test_spl_balance_checked(service):
    wallet = {"solBalance": 1, "tokenBalances": [{"symbol": "USDC", "balance": 10}]}

    assert service.validate_swap_request(_intent(fromToken="USDC", toToken="SOL", amount="5"), wallet).valid

    result = service.validate_swap_request(_intent(fromToken="USDC", toToken="SOL", amount="50"), wallet)
    assert "Insufficient USDC balance" in result.reason


def test_spl_swap_needs_sol_for_fees(service):
    wallet = {"solBalance": 0, "tokenBalances": [{"symbol": "USDC", "balance": 10}]}

    result = service.validate_swap_request(_intent(fromToken="USDC", toToken="SOL", amount="5"), wallet)

    assert result.reason == "Insufficient SOL to cover network fees"


@pytest.mark.asyncio
async def test_estimate_uses_reference_prices_offline(service):
    estimate = await service.get_swap_estimate(_intent(amount="2"))
    wire = estimate.to_wire()

    assert wire["inputToken"] == "SOL"
    assert wire["usdValue"] == "300.00"
    assert wire["priceImpact"] == 0.1
    assert wire["estimatedOutput"] == "299.700000"
    assert wire["networkFee"] == "0.000005"

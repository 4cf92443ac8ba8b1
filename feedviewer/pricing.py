from . import settings
from .schemas import PriceCalculation
from .utils import round_half_up


def calculate_price(
    wholesale_price: float,
    markup_percent: float = settings.DEFAULT_MARKUP_PERCENT,
    ebay_fee_percent: float = settings.DEFAULT_EBAY_FEE_PERCENT,
    paypal_fee_percent: float = settings.DEFAULT_PAYPAL_FEE_PERCENT,
    paypal_fixed_fee: float = settings.DEFAULT_PAYPAL_FIXED_FEE,
) -> PriceCalculation:
    """
    Resale price, marketplace fees and return on the wholesale cost.
    Fees are charged on the selling price; ROI is 0 for free items.
    """
    selling_price = wholesale_price * (1 + markup_percent / 100)

    ebay_fee = selling_price * (ebay_fee_percent / 100)
    paypal_fee = selling_price * (paypal_fee_percent / 100) + paypal_fixed_fee
    profit = selling_price - wholesale_price - (ebay_fee + paypal_fee)

    roi = (profit / wholesale_price) * 100 if wholesale_price > 0 else 0.0

    return PriceCalculation(
        markup_percent=markup_percent,
        ebay_fee_percent=ebay_fee_percent,
        paypal_fee_percent=paypal_fee_percent,
        paypal_fixed_fee=paypal_fixed_fee,
        selling_price=round_half_up(selling_price),
        profit=round_half_up(profit),
        roi=round_half_up(roi),
    )

"""Fixed-point constants shared by valuation, health and liquidation."""

PRECISION = 10**18
FEED_PRECISION_DECIMALS = 18

LIQUIDATION_THRESHOLD = 50  # 200% over-collateralized
LIQUIDATION_PRECISION = 100
LIQUIDATION_BONUS = 10  # 10% extra collateral to the liquidator

MIN_HEALTH_FACTOR = 1 * PRECISION
MAX_HEALTH_FACTOR = 2**256 - 1  # positions without debt

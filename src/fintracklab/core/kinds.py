"""
FinTrackLab category constants (asset types and metal types).
"""


class K:
    # === Investment asset types ===
    STOCKS = "Stocks"
    FUNDS = "Funds"
    BONDS = "Bonds"
    CASH = "Cash"
    GOLD = "Gold"  # paper gold / gold funds, tracked as an investment
    TIME_DEPOSITS = "Time Deposits"  # fixed-term deposits, valued by accrual
    OTHERS = "Others"

    # === Precious metal types (physical holdings) ===
    METAL_GOLD = "Gold"
    METAL_SILVER = "Silver"
    METAL_PLATINUM = "Platinum"
    METAL_PALLADIUM = "Palladium"

    @classmethod
    def asset_kinds(cls) -> list[str]:
        """Enumerate the known investment asset types."""
        return [
            cls.STOCKS,
            cls.FUNDS,
            cls.BONDS,
            cls.CASH,
            cls.GOLD,
            cls.TIME_DEPOSITS,
            cls.OTHERS,
        ]

    @classmethod
    def metal_kinds(cls) -> list[str]:
        """Enumerate the known precious metal types."""
        return [
            cls.METAL_GOLD,
            cls.METAL_SILVER,
            cls.METAL_PLATINUM,
            cls.METAL_PALLADIUM,
        ]

from decimal import Decimal
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "LENDCALC_", "extra": "ignore"}

    # Calendar
    # Used for irregular first periods and daily simple interest when LoanTerms names none
    day_count_convention: Literal["30/360", "actual/360", "actual/365", "actual/actual"] = "30/360"

    # Allocation field that absorbs a rounding residual
    residual_target: Literal["principal", "interest"] = "principal"

    # Structural ceilings on loan terms
    max_term_months: int = Field(default=600, gt=0)
    max_principal: Decimal = Field(default=Decimal("100000000"), gt=0)
    max_annual_rate: Decimal = Field(default=Decimal("100"), gt=0)

    # Calculation cache
    cache_capacity: int = Field(default=1024, gt=0)

    # Re-amortized schedules ignore fractional periods up to this (payment rounding drift)
    term_tolerance: Decimal = Field(default=Decimal("0.01"), ge=0, lt=1)


settings = Settings()

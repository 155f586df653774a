"""Parameters of an existing pool as reported by the settlement layer."""

from pydantic import BaseModel, ConfigDict, Field

from offerfill.constants import ZERO_ADDRESS
from offerfill.models.types import Address, Bytes32, Uint256, is_zero_address


class PoolParameters(BaseModel):
    """Snapshot of a pool's on-chain parameters.

    A pool id the settlement layer does not know comes back with every
    field zeroed, including the collateral token.
    """

    pool_id: Bytes32 = Field(alias="poolId")
    collateral_token: Address = Field(alias="collateralToken")
    collateral_balance: Uint256 = Field(alias="collateralBalance")
    capacity: Uint256
    expiry_time: Uint256 = Field(alias="expiryTime")

    long_token: Address = Field(default=ZERO_ADDRESS, alias="longToken")
    short_token: Address = Field(default=ZERO_ADDRESS, alias="shortToken")
    data_provider: Address = Field(default=ZERO_ADDRESS, alias="dataProvider")
    reference_asset: str = Field(default="", alias="referenceAsset")
    floor: Uint256 = 0
    inflection: Uint256 = 0
    cap: Uint256 = 0
    gradient: Uint256 = 0
    final_reference_value: Uint256 = Field(default=0, alias="finalReferenceValue")
    status_final_reference_value: int = Field(default=0, alias="statusFinalReferenceValue")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def exists(self) -> bool:
        return not is_zero_address(self.collateral_token)

    @property
    def remaining_capacity(self) -> int:
        """Collateral that can still be added before the cap is hit."""
        return max(0, self.capacity - self.collateral_balance)

    def position_token(self, is_long: bool) -> str:
        """Long or short position token of the pool."""
        return self.long_token if is_long else self.short_token

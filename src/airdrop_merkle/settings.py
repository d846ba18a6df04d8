from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Output location for `build` (created on write, not at import)
    airdrop_out_dir: Path = Path("./out")
    airdrop_claims_file: str = "claims.json"
    airdrop_log_level: str = "WARNING"
    # EIP-55 checksummed accounts in the claims document; lower-case when false
    airdrop_checksum_accounts: bool = True

    @property
    def claims_path(self) -> Path:
        return self.airdrop_out_dir / self.airdrop_claims_file


settings = Settings()

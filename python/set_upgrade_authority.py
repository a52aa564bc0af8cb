import sys

from upgrade_authority.config import AuthorityConfig, RpcUrl
from upgrade_authority.invoker import run

# Edit these before running.
# Keypair of the CURRENT upgrade authority; it signs and pays fees.
CURRENT_AUTHORITY_KEYPAIR_PATH = "REPLACE_WITH_PATH_TO_YOUR_CURRENT_AUTHORITY_KEYPAIR.json"
TARGET_PROGRAM_ID = "REPLACE_WITH_YOUR_PROGRAM_ID"
# May be a PDA; the new authority is never asked to co-sign.
NEW_UPGRADE_AUTHORITY_PUBKEY = "REPLACE_WITH_THE_NEW_UPGRADE_AUTHORITY_PUBKEY"
SOLANA_CLUSTER_URL = RpcUrl.DEVNET
# None waits for the solana CLI indefinitely.
TIMEOUT_SECONDS = None


def main():
    config = AuthorityConfig(
        keypair_path=CURRENT_AUTHORITY_KEYPAIR_PATH,
        program_id=TARGET_PROGRAM_ID,
        new_authority=NEW_UPGRADE_AUTHORITY_PUBKEY,
        cluster_url=SOLANA_CLUSTER_URL,
        timeout=TIMEOUT_SECONDS,
    )
    return run(config)


if __name__ == '__main__':
    sys.exit(main())

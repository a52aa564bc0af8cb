from dataclasses import dataclass
from typing import Optional

from solders.pubkey import Pubkey

from .errors import ProgramAccountError
from .pda import parse_pubkey

BPF_LOADER_UPGRADEABLE = Pubkey.from_string("BPFLoaderUpgradeab1e11111111111111111111111")

# UpgradeableLoaderState discriminants (u32, little endian)
PROGRAM_STATE = 2
PROGRAMDATA_STATE = 3


@dataclass(frozen=True)
class ProgramAuthority:
    program_id: Pubkey
    programdata_address: Pubkey
    last_deploy_slot: int
    authority: Optional[Pubkey]

    @property
    def is_immutable(self):
        return self.authority is None


def _state(data):
    if len(data) < 4:
        raise ProgramAccountError("Account data too short for an upgradeable loader state.")
    return int.from_bytes(data[0:4], "little")


def programdata_address_from(data):
    if _state(data) != PROGRAM_STATE or len(data) < 36:
        raise ProgramAccountError("Account is not an upgradeable program account.")
    return Pubkey(bytes(data[4:36]))


def decode_programdata(data):
    """Returns (slot, authority or None) from a ProgramData account."""
    if _state(data) != PROGRAMDATA_STATE or len(data) < 13:
        raise ProgramAccountError("Account is not a ProgramData account.")
    slot = int.from_bytes(data[4:12], "little")
    if data[12] == 0:
        return slot, None
    if len(data) < 45:
        raise ProgramAccountError("ProgramData account truncated before the authority.")
    return slot, Pubkey(bytes(data[13:45]))


async def _account(client, pubkey, label):
    resp = await client.get_account_info(pubkey)
    account = resp.value
    if account is None:
        raise ProgramAccountError(f"{label} {pubkey} does not exist on this cluster.")
    if account.owner != BPF_LOADER_UPGRADEABLE:
        raise ProgramAccountError(f"{label} {pubkey} is not owned by the upgradeable BPF loader.")
    return account


async def fetch_upgrade_authority(client, program_id):
    program_pubkey = parse_pubkey(program_id, "program id") if isinstance(program_id, str) else program_id
    program_account = await _account(client, program_pubkey, "Program")
    programdata_pubkey = programdata_address_from(program_account.data)
    programdata_account = await _account(client, programdata_pubkey, "ProgramData account")
    slot, authority = decode_programdata(programdata_account.data)
    return ProgramAuthority(
        program_id=program_pubkey,
        programdata_address=programdata_pubkey,
        last_deploy_slot=slot,
        authority=authority,
    )

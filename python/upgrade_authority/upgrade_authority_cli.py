import sys

import asyncclick as click
from rich import print
from rich.console import Console
from rich.markup import escape
from solana.rpc.async_api import AsyncClient

from . import invoker
from .cli_state import CLI_VERSION
from .config import (
    DEFAULT_SOLANA_BIN,
    NEW_AUTHORITY_PLACEHOLDER,
    AuthorityConfig,
    ConfigStore,
    RpcUrl,
)
from .errors import AuthorityCliError
from .pda import derive_authority, parse_pubkey
from .program_account import fetch_upgrade_authority


@click.group()
@click.version_option(version=CLI_VERSION)
def entry():
    pass


def _load_store():
    try:
        store = ConfigStore()
        store.load()
    except AuthorityCliError as e:
        print(f"[red]ERROR:[/red] {escape(str(e))}")
        sys.exit(1)
    return store


@click.command(name="set_authority")
@click.option('--keypair', '-k', default=None, help="Keypair of the current upgrade authority.")
@click.option('--program_id', '-p', default=None)
@click.option('--new_authority', '-n', default=NEW_AUTHORITY_PLACEHOLDER)
@click.option('--url', '-u', default=None, help="Cluster URL or one of mainnet, testnet, devnet, localnet.")
@click.option('--timeout', '-t', default=None, type=float, help="Seconds to wait for the solana CLI.")
@click.option('--solana_bin', default=DEFAULT_SOLANA_BIN)
@click.option('--log_level', '-l', default=2, type=int)
def set_authority(keypair, program_id, new_authority, url, timeout, solana_bin, log_level):
    store = _load_store()
    config = AuthorityConfig(
        keypair_path=keypair or store.get_keypair_path(),
        program_id=program_id or store.get_program_id(),
        new_authority=new_authority,
        cluster_url=RpcUrl.get_network_url(url) if url else store.get_network(),
        solana_bin=solana_bin,
        timeout=timeout,
    )
    sys.exit(invoker.run(config, runner=invoker.subprocess_runner, console=Console(), log_level=log_level))


@click.command(name="show_authority")
@click.argument('program_id')
@click.option('--url', '-u', default=None)
@click.option('--log_level', '-l', default=2, type=int)
async def show_authority(program_id, url, log_level):
    store = _load_store()
    url = RpcUrl.get_network_url(url) if url else store.get_network()
    client = AsyncClient(url)
    try:
        if log_level >= 2:
            client_state = await client.is_connected()
            print("Client is connected" if client_state else "Client is Disconnected")
        details = await fetch_upgrade_authority(client, program_id)
    except AuthorityCliError as e:
        print(f"[red]ERROR:[/red] {escape(str(e))}")
        sys.exit(1)
    finally:
        await client.close()
    print("\nProgram Id: ", str(details.program_id))
    print("ProgramData Address: ", str(details.programdata_address))
    print("Last Deployed In Slot: ", details.last_deploy_slot)
    print("Upgrade Authority: ", "none (immutable)" if details.is_immutable else str(details.authority))


@click.command(name="derive_authority")
@click.argument('program_id')
@click.argument('seeds', nargs=-1)
@click.option('--no_program_seed', is_flag=True, default=False, help="Do not append the program id as the last seed.")
def derive(program_id, seeds, no_program_seed):
    try:
        address, bump = derive_authority(program_id, seeds, include_program_id=not no_program_seed)
    except AuthorityCliError as e:
        print(f"[red]ERROR:[/red] {escape(str(e))}")
        sys.exit(1)
    print("Authority: ", str(address))
    print("Bump: ", bump)


@click.group(name="config")
def config():
    pass


@click.command(name="set")
@click.option("--program_id", "-p")
@click.option("--url", "-u")
@click.option("--keypair", "-k")
def set(program_id, url, keypair):
    if not program_id and not url and not keypair:
        print("No options specified. Use --help for more information.")
        sys.exit(1)
    store = _load_store()
    if program_id:
        try:
            program_id = str(parse_pubkey(program_id, "program id"))
        except AuthorityCliError:
            print("Invalid Public Key provided.")
            sys.exit(1)
    if url:
        url = RpcUrl.get_network_url(url)
    store.update(program_id=program_id, url=url, keypair=keypair)
    if program_id:
        print("Program ID set to: ", program_id)
    if url:
        print("Network set to: ", url)
    if keypair:
        print("Keypair set to: ", keypair)
    print("Config set successfully.")


@click.command(name="get")
def get():
    store = _load_store()
    print("\nProgram ID: ", store.get_program_id())
    print("Network: ", store.get_network())
    print("Keypair: ", store.get_keypair_path())
    print("\nConfig retrieved successfully.")


config.add_command(set)
config.add_command(get)

entry.add_command(set_authority)
entry.add_command(show_authority)
entry.add_command(derive)
entry.add_command(config)

if __name__ == '__main__':
    entry()

"""Sign a message and a transaction with the backend configured in the environment.

Set SIGNER_BACKEND to gcp, aws or local and the matching variables
(see custody_signer.config), optionally in a .env file.
"""

import os

import dotenv
from eth_account import Account
from eth_account.messages import encode_defunct
from rich.console import Console
from rich.traceback import install

from custody_signer import CustodyAccount, SignerError, create_provider
from custody_signer.config import AwsKmsConfig, GcpKmsConfig, LocalKeyConfig
from custody_signer.registry import clients
from custody_signer.types.ethereum_types import Transaction

# Install rich traceback handler
install()

console = Console()

CONFIGS = {
    "gcp": GcpKmsConfig,
    "aws": AwsKmsConfig,
    "local": LocalKeyConfig,
}


def main() -> None:
    dotenv.load_dotenv()
    backend = os.getenv("SIGNER_BACKEND", "local")
    config = CONFIGS[backend].from_env()

    account = CustodyAccount(create_provider(config))
    console.print(f"[green]Account address: {account.address}[/green]")

    console.print("\n[bold blue]Testing Message Signing[/bold blue]")
    message = "Hello Ethereum!"
    signature = account.sign_message(message)
    console.print(f"Message signature: {signature.to_hex()}")
    recovered = Account.recover_message(encode_defunct(text=message), vrs=signature.vrs)
    console.print(f"Recovered signer: {recovered}")

    console.print("\n[bold blue]Testing Transaction Signing[/bold blue]")
    tx = Transaction(
        chain_id=31337,
        nonce=0,
        gas_price=1_000_000_000,
        gas_limit=21000,
        to="0xa5D3241A1591061F2a4bB69CA0215F66520E67cf",
        value=10**15,
    )
    signed_tx = account.sign_transaction(tx)
    console.print(f"Signed transaction: 0x{signed_tx.hex()}")


if __name__ == "__main__":
    try:
        main()
    except SignerError:
        console.print_exception()
    finally:
        clients.close_all()

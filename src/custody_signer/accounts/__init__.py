from custody_signer.accounts.account import CustodyAccount

__all__ = ["CustodyAccount"]

"""WalletPalz personal finance backend."""

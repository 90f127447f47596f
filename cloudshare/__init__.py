"""cloudshare: ephemeral file bundles with a time-to-live."""

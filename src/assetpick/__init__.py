"""assetpick - rank release artifacts for the machine you are running on."""

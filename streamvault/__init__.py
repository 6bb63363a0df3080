"""StreamVault video catalog service and tooling."""

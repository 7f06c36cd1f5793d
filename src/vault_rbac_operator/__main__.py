"""Run the operator: ``python -m vault_rbac_operator``."""

from __future__ import annotations

import kopf

from . import main as handlers


def main() -> None:
    # Narrows the watch to the include list and enables peering when leader
    # election is configured
    kopf.run(**handlers.CONFIG.run_options())


if __name__ == "__main__":
    main()

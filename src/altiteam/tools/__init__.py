"""Tool modules. Each module registers its tools on import (see core.loader)."""

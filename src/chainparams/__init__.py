# re-import names that should be visible to the user
from .base58 import Base58Type  # noqa: F401
from .blockfile import verify_genesis  # noqa: F401
from .exceptions import *  # noqa: F401,F403
from .network import (  # noqa: F401
    MAIN,
    REGTEST,
    TEST,
    UNITTEST,
    NetworkId,
    NetworkParameters,
    UnitTestParameters,
    estimated_blockchain_size,
)
from .registry import (  # noqa: F401
    current_network,
    lookup_network,
    modifiable_network,
    network_selected,
    select_network,
    select_network_from_flags,
)

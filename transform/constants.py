import os
from typing import Tuple

import dotenv

dotenv.load_dotenv()

TAG_NAMESPACE: str = os.getenv("TAG_NAMESPACE", "jt")

# Collections whose loops never shift surrounding content, e.g. "header,totals".
FIXED_SIZE_COLLECTIONS: Tuple[str, ...] = tuple(
    name.strip() for name in os.getenv("FIXED_SIZE_COLLECTIONS", "").split(",") if name.strip()
)

DEFAULT_PAST_END_ACTION: str = os.getenv("DEFAULT_PAST_END_ACTION", "clear")

# Bean name suffix for the item of an implicit collection loop.
IMPLICIT_ITEM_SUFFIX: str = os.getenv("IMPLICIT_ITEM_SUFFIX", "__item")

"""License normalization for package license expressions.

NuGet packages declare their license either as an SPDX expression
(``<license type="expression">``) or only as a license URL. This module maps
the expression or a free-form license name to a normalized LicenseLink.
"""

import logging
from functools import lru_cache
from typing import Optional

from license_expression import ExpressionError, get_spdx_licensing

from plugin_generator.models import LicenseLink

logger = logging.getLogger(__name__)

SPDX = get_spdx_licensing()

# Common license aliases and variations map
LICENSE_MAP = {
    "Apache 2.0": "Apache-2.0",
    "Apache License 2.0": "Apache-2.0",
    "Apache License, Version 2.0": "Apache-2.0",
    "MIT License": "MIT",
    "The MIT License": "MIT",
    "BSD 3-Clause License": "BSD-3-Clause",
    "BSD 2-Clause License": "BSD-2-Clause",
    "Microsoft Public License": "MS-PL",
    "Microsoft Reciprocal License": "MS-RL",
    "GNU General Public License v3": "GPL-3.0",
    "GNU General Public License v2": "GPL-2.0",
    "GNU Lesser General Public License v3": "LGPL-3.0",
    "Mozilla Public License 2.0": "MPL-2.0",
}

# Common SPDX IDs for case-insensitive matching
COMMON_SPDX = [
    "MIT", "Apache-2.0", "MS-PL", "MS-RL", "GPL-3.0", "GPL-2.0", "LGPL-3.0",
    "BSD-3-Clause", "BSD-2-Clause", "MPL-2.0",
]


def spdx_url(spdx_id: str) -> str:
    return f"https://spdx.org/licenses/{spdx_id}.html"


@lru_cache(maxsize=1024)
def normalize_license(license_text: Optional[str]) -> Optional[LicenseLink]:
    """Normalize a license expression or name to an SPDX-based LicenseLink.

    Tries the alias table first, then the license-expression SPDX parser,
    then a case-insensitive match against common SPDX identifiers.

    Args:
        license_text: Raw license expression or name from the package.

    Returns:
        LicenseLink with SPDX identifier and URL, or None if not recognized.
    """
    if not license_text or not license_text.strip():
        return None

    license_text = license_text.strip()

    if license_text in LICENSE_MAP:
        spdx_id = LICENSE_MAP[license_text]
        return LicenseLink(spdx_id=spdx_id, name=license_text, url=spdx_url(spdx_id))

    try:
        parsed = SPDX.parse(license_text, validate=True)
    except ExpressionError as e:
        logger.debug("License expression '%s' is not valid SPDX: %s", license_text, e)
        parsed = None

    if parsed is not None:
        spdx_id = str(parsed).strip()
        return LicenseLink(spdx_id=spdx_id, name=license_text, url=spdx_url(spdx_id))

    license_upper = license_text.upper()
    compact = license_upper.replace("-", "").replace(" ", "")
    for spdx_id in COMMON_SPDX:
        if spdx_id.upper() in license_upper or spdx_id.upper().replace("-", "") in compact:
            return LicenseLink(spdx_id=spdx_id, name=license_text, url=spdx_url(spdx_id))

    logger.debug("Could not normalize license: %s", license_text)
    return None

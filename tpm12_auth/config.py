# SPDX-License-Identifier: BSD-2
import json
import pkgutil

CONFIG = json.loads(pkgutil.get_data(__package__, "config.json").decode())

CONSTANT_TIME_COMPARE = bool(CONFIG.get("constant_time_compare", True))

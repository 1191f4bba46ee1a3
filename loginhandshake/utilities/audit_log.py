#!/usr/bin/env python3
# -*- coding: utf-8 -*-


from datetime import datetime, timezone
import json
import os
import sys
import typing
import threading

_AUDIT_FILE = os.path.join(os.path.dirname(__file__), "audit.log")


#####################################################################################################################################################################

"""
    Provides persistent structured audit logging for the login handshake.
    One JSON object per line, each stamped with an ISO8601Z timestamp.
"""
class AuditLog:

	def __init__(self, path: typing.Optional[str] = None):
		self._path = path if path is not None else _AUDIT_FILE
		self._lock = threading.RLock()


	@property
	def path(self) -> str:
		return self._path


	def event(self, **kv: typing.Any):

		# Construct ISO8601Z timestamp
		ts = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

		# Append timestamp to event
		record = {"timestamp": ts}
		record.update(kv)

		with self._lock:
			try:
				with open(self._path, "a", encoding="utf-8") as f:
					json.dump(record, f, ensure_ascii=False, default=str)
					f.write("\n")

			except OSError as e:
				print(f"Audit log write error: {e}", file=sys.stderr)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import json
import os
import tempfile
import threading
import unittest
from loginhandshake.utilities.audit_log import AuditLog


class TestAuditLog(unittest.TestCase):

	def setUp(self) -> None:
		self.temp_dir = tempfile.TemporaryDirectory(prefix="audit_log_test_")
		self.addCleanup(self.temp_dir.cleanup)
		self.path = os.path.join(self.temp_dir.name, "audit.log")

	"""
		Each event is one JSON line with a timestamp.
	"""
	def test_event_appends_json_lines(self):

		log = AuditLog(self.path)
		log.event(event="client_key_rejected", reason="expired")
		log.event(event="signed_nonce_rejected", username="Notch")

		with open(self.path, "r", encoding="utf-8") as f:
			records = [json.loads(line) for line in f]

		self.assertEqual(["client_key_rejected", "signed_nonce_rejected"], [r["event"] for r in records])
		self.assertRegex(records[0]["timestamp"], r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")

	"""
		Concurrent writers never interleave inside a line.
	"""
	def test_concurrent_events(self):

		log = AuditLog(self.path)
		threads = [threading.Thread(target=lambda i=i: [log.event(event="tick", worker=i, n=n) for n in range(50)]) for i in range(4)]

		for t in threads:
			t.start()
		for t in threads:
			t.join()

		with open(self.path, "r", encoding="utf-8") as f:
			records = [json.loads(line) for line in f]

		self.assertEqual(200, len(records))

	"""
		A write failure is reported, never raised.
	"""
	def test_write_failure_is_swallowed(self):

		log = AuditLog(os.path.join(self.temp_dir.name, "missing", "audit.log"))
		log.event(event="anything")

		self.assertFalse(os.path.exists(log.path))


if __name__ == "__main__":
	unittest.main()

#!/usr/bin/env python3
"""
End-to-end smoke test against a running SecureHealth server.

Walks the main flow over HTTP and reports every failing call:
init hospitals, register a patient, search as two hospitals, check the
reward and the access log, verify the digest, log out.

    python smoke_api.py [BASE_URL]
"""
import sys
import time
from dataclasses import dataclass
from typing import List, Optional

import requests

BASE_URL = "http://127.0.0.1:8000"


@dataclass
class TestResult:
    success: bool
    endpoint: str
    method: str
    status_code: int
    response_time: float
    description: str = ""
    error_message: str = ""


class SmokeTester:
    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.results: List[TestResult] = []

    def call(self, session: requests.Session, method: str, endpoint: str, description: str,
             expect: int = 200, json: Optional[dict] = None) -> Optional[requests.Response]:
        headers = {}
        token = session.cookies.get('csrftoken')
        if token:
            headers['X-CSRFToken'] = token
        start = time.time()
        try:
            response = session.request(method, f"{self.base_url}{endpoint}", json=json, headers=headers, timeout=15)
        except requests.RequestException as e:
            self.results.append(TestResult(False, endpoint, method, 0, time.time() - start, description, str(e)))
            print(f"❌ {description}: {e}")
            return None
        elapsed = time.time() - start
        ok = response.status_code == expect
        error = "" if ok else f"expected {expect}, got {response.status_code}: {response.text[:200]}"
        self.results.append(TestResult(ok, endpoint, method, response.status_code, elapsed, description, error))
        print(f"{'✅' if ok else '❌'} {description} ({response.status_code}, {elapsed:.2f}s)")
        return response

    def check(self, condition: bool, description: str):
        self.results.append(TestResult(condition, '-', 'CHECK', 0, 0.0, description,
                                       "" if condition else "assertion failed"))
        print(f"{'✅' if condition else '❌'} {description}")

    def hospital_session(self, name: str) -> requests.Session:
        s = requests.Session()
        self.call(s, 'GET', '/api/hospital/session', f"{name}: fetch CSRF cookie")
        self.call(s, 'POST', '/api/hospital/login', f"{name}: login", json={'username': name, 'password': name})
        return s

    def run(self) -> bool:
        anon = requests.Session()
        self.call(anon, 'GET', '/healthz', "health check")
        self.call(anon, 'POST', '/api/init', "initialize default hospitals")
        self.call(anon, 'GET', '/api/hospitals', "list hospitals")

        contact = f"555-{int(time.time()) % 10000:04d}"
        r = self.call(anon, 'POST', '/api/patient/register', "register patient", expect=201, json={
            'patientName': 'Smoke Test Patient',
            'age': 42,
            'gender': 'other',
            'contactNo': contact,
            'problemDesc': 'smoke test lumbar strain with sciatica',
            'accessData': 'Hospital1',
        })
        if r is None or r.status_code != 201:
            return self.report()
        patient_id = r.json()['patientId']
        number = r.json()['patientNumber']

        self.call(anon, 'POST', '/api/patient/login', "patient login by number",
                  json={'patientNumber': str(number), 'contactNo': contact})
        self.call(anon, 'POST', '/api/hospital/search', "search without session is rejected",
                  expect=401, json={'query': 'sciatica'})

        h1 = self.hospital_session('Hospital1')
        r = self.call(h1, 'POST', '/api/hospital/search', "Hospital1 search", json={'query': 'smoke test lumbar'})
        row = self._find(r, patient_id)
        self.check(bool(row and row['allowed']), "Hospital1 sees the full profile")

        h2 = self.hospital_session('Hospital2')
        r = self.call(h2, 'POST', '/api/hospital/search', "Hospital2 search", json={'query': 'smoke test lumbar'})
        row = self._find(r, patient_id)
        self.check(bool(row and not row['allowed'] and row['name'] == 'Access Denied'),
                   "Hospital2 gets a redacted row")

        r = self.call(anon, 'GET', f'/api/patient/{patient_id}/access-logs', "patient access logs")
        if r is not None and r.ok:
            self.check(len(r.json()) >= 2, "both searches were logged")
        r = self.call(anon, 'GET', f'/api/patient/{patient_id}/verify', "verify integrity digest")
        if r is not None and r.ok:
            self.check(r.json().get('valid') is True, "digest is valid")

        self.call(h1, 'POST', '/api/hospital/logout', "Hospital1 logout")
        self.call(h1, 'POST', '/api/hospital/search', "search after logout is rejected",
                  expect=401, json={'query': 'sciatica'})
        return self.report()

    @staticmethod
    def _find(response, patient_id):
        if response is None or not response.ok:
            return None
        for row in response.json().get('results', []):
            if row['id'] == patient_id:
                return row
        return None

    def report(self) -> bool:
        failed = [r for r in self.results if not r.success]
        print(f"\n{len(self.results) - len(failed)}/{len(self.results)} checks passed")
        for r in failed:
            print(f"  {r.method} {r.endpoint} - {r.description}: {r.error_message}")
        return not failed


def main():
    base = sys.argv[1] if len(sys.argv) > 1 else BASE_URL
    sys.exit(0 if SmokeTester(base).run() else 1)


if __name__ == '__main__':
    main()

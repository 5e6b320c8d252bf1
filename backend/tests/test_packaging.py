from __future__ import annotations

import tomllib
import unittest
from pathlib import Path

PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _names(requirements: list[str]) -> set[str]:
    names = set()
    for req in requirements:
        for sep in "<>=!~[; ":
            req = req.split(sep, 1)[0]
        names.add(req.strip().lower())
    return names


class PackagingTests(unittest.TestCase):
    def setUp(self) -> None:
        with PYPROJECT.open("rb") as fh:
            self.project = tomllib.load(fh)["project"]

    def test_runtime_dependencies(self) -> None:
        runtime = _names(self.project["dependencies"])
        self.assertEqual(runtime, {"fastapi", "pydantic", "uvicorn"})

    def test_test_client_dependency_is_test_only(self) -> None:
        test_extra = _names(self.project["optional-dependencies"]["test"])
        self.assertIn("httpx", test_extra)
        self.assertNotIn("httpx", _names(self.project["dependencies"]))


if __name__ == "__main__":
    unittest.main()

"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

APACHE_TEXT = """                                 Apache License
                           Version 2.0, January 2004
                        http://www.apache.org/licenses/
"""


@pytest.fixture
def make_package() -> Callable[..., Path]:
    """Return a helper writing a package directory with its package.json.

    The helper takes the package directory, the manifest, and optionally the
    license text and license filename, and returns the directory.
    """

    def _make(
        directory: Path,
        manifest: dict[str, Any],
        license_text: Optional[str] = None,
        license_name: str = "LICENSE",
    ) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        (directory / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
        if license_text is not None:
            (directory / license_name).write_text(license_text, encoding="utf-8")
        return directory

    return _make


@pytest.fixture
def npm_project(tmp_path: Path, make_package: Callable[..., Path]) -> Path:
    """Create an installed npm project resembling a small Angular app.

    Layout::

        project/
            package.json          fixture-app@1.0.0
            node_modules/
                angular/          direct dependency
                rxjs/             direct dependency, depends on tslib
                tslib/            transitive dependency
                uuid/             direct dependency, no author info
                @angular-devkit/build-angular/   dev dependency only
    """
    project = tmp_path / "project"
    make_package(
        project,
        {
            "name": "fixture-app",
            "version": "1.0.0",
            "license": "MIT",
            "dependencies": {"angular": "^1.8.2", "rxjs": "^6.6.3", "uuid": "^8.3.2"},
            "devDependencies": {"@angular-devkit/build-angular": "^0.1100.0"},
        },
    )
    modules = project / "node_modules"
    make_package(
        modules / "angular",
        {
            "name": "angular",
            "version": "1.8.2",
            "license": "MIT",
            "author": "Angular Core Team <angular-core+npm@google.com>",
            "repository": {"type": "git", "url": "https://github.com/angular/angular.js.git"},
        },
        license_text="The MIT License (MIT)\n\nCopyright (c) 2010-2020 Google LLC.\n",
        license_name="LICENSE.md",
    )
    make_package(
        modules / "rxjs",
        {
            "name": "rxjs",
            "version": "6.6.3",
            "license": "Apache-2.0",
            "author": {"name": "Ben Lesh", "email": "ben@benlesh.com"},
            "contributors": [{"name": "Someone Else", "email": "else@example.com"}],
            "repository": {"type": "git", "url": "git+ssh://git@github.com/reactivex/rxjs.git"},
            "dependencies": {"tslib": "^1.9.0"},
        },
        license_text=APACHE_TEXT,
        license_name="LICENSE.txt",
    )
    make_package(
        modules / "tslib",
        {
            "name": "tslib",
            "version": "1.14.1",
            "license": "0BSD",
            "author": "Microsoft Corp.",
            "repository": {"type": "git", "url": "https://github.com/Microsoft/tslib.git"},
        },
        license_text="Copyright (c) Microsoft Corporation.\n",
        license_name="LICENSE.txt",
    )
    make_package(
        modules / "uuid",
        {
            "name": "uuid",
            "version": "8.3.2",
            "license": "MIT",
            "repository": {"type": "git", "url": "https://github.com/uuidjs/uuid.git"},
        },
    )
    make_package(
        modules / "@angular-devkit" / "build-angular",
        {
            "name": "@angular-devkit/build-angular",
            "version": "0.1100.0",
            "license": "MIT",
        },
    )
    return project

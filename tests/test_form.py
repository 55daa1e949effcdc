"""Tests for upload form fields."""

import hashlib

from distpub.core.filename import parse_dist_filename
from distpub.core.form import build_form_fields, form_metadata, hash_file
from distpub.core.metadata import PackageMetadata


def test_hash_file(tmp_path):
    """Test that the streamed hash matches hashlib on the full content."""
    path = tmp_path / "foo-1.0.tar.gz"
    content = bytes(range(256)) * 1000
    path.write_bytes(content)

    digest = hash_file(path)

    assert digest == hashlib.sha256(content).hexdigest()

    # Changing a single byte changes the digest
    mutated = bytearray(content)
    mutated[1000] ^= 0xFF
    path.write_bytes(bytes(mutated))
    assert hash_file(path) != digest


def test_sdist_form_fields(make_sdist):
    """Test the fixed field prefix and omission of absent fields."""
    path = make_sdist()
    filename = parse_dist_filename(path.name)

    form = form_metadata(path, filename)

    assert form[:8] == [
        (":action", "file_upload"),
        ("sha256_digest", hashlib.sha256(path.read_bytes()).hexdigest()),
        ("protocol_version", "1"),
        ("metadata_version", "2.3"),
        ("name", "tqdm"),
        ("version", "999.0.0"),
        ("filetype", "sdist"),
        ("pyversion", "source"),
    ]

    names = [name for name, _ in form]
    assert "summary" not in names
    assert "license" not in names
    assert "author" not in names
    # Always present, empty when the metadata has no Requires-Python
    assert ("requires_python", "") in form
    assert names.count("classifiers") == 2
    assert "requires_dist" not in names


def test_wheel_form_fields(make_wheel):
    """Test that wheel fields are filled from METADATA."""
    path = make_wheel(filename="tqdm-4.66.1-py2.py3-none-any.whl")
    filename = parse_dist_filename(path.name)

    form = form_metadata(path, filename)
    fields = dict(form)

    assert fields["filetype"] == "bdist_wheel"
    assert fields["pyversion"] == "py2.py3"
    assert fields["summary"] == "Fast, Extensible Progress Meter"
    assert fields["keywords"] == "progressbar,progressmeter,progress"
    assert fields["requires_python"] == ">=3.7"
    assert fields["description_content_type"] == "text/x-rst"
    assert [value for name, value in form if name == "project_urls"] == [
        "homepage, https://tqdm.github.io",
        "repository, https://github.com/tqdm/tqdm",
    ]
    assert [value for name, value in form if name == "requires_dist"] == [
        'colorama ; platform_system == "Windows"',
        "pytest >=6 ; extra == 'dev'",
    ]


def test_build_form_fields_order():
    """Test that optional and repeated fields follow the fixed order."""
    metadata = PackageMetadata(
        metadata_version="2.1",
        name="Foo_Bar",
        version="1.0",
        summary="Summary",
        license="MIT",
        requires_python=">=3.8",
        classifiers=["A", "B"],
        platforms=["linux"],
        obsoletes_dist=["old"],
    )
    filename = parse_dist_filename("Foo_Bar-1.0.tar.gz")

    form = build_form_fields("0" * 64, filename, metadata)

    assert [name for name, _ in form] == [
        ":action",
        "sha256_digest",
        "protocol_version",
        "metadata_version",
        "name",
        "version",
        "filetype",
        "pyversion",
        "summary",
        "license",
        "requires_python",
        "classifiers",
        "classifiers",
        "platform",
        "obsoletes_dist",
    ]
    # The name is sent as written
    assert ("name", "Foo_Bar") in form


def test_form_fields_keep_metadata_text():
    """Test that keywords and project URLs reach the form unchanged."""
    metadata = PackageMetadata.parse(
        "Metadata-Version: 2.1\n"
        "Name: foo\n"
        "Version: 1.0\n"
        "Keywords: foo, bar baz\n"
        "Project-URL: Homepage,https://example.org\n"
    )
    filename = parse_dist_filename("foo-1.0.tar.gz")

    form = build_form_fields("0" * 64, filename, metadata)
    fields = dict(form)

    assert fields["keywords"] == "foo, bar baz"
    assert fields["project_urls"] == "Homepage,https://example.org"

from pathlib import Path

import pytest

from osresolve.config import load_config, parse_repo_file

REPO_FILE = """\
# Azure Linux base repository
[azurelinux-official-base]
name=Azure Linux Official Base
baseurl=https://packages.microsoft.com/azurelinux/3.0/prod/base/x86_64
gpgkey=file:///etc/pki/rpm-gpg/MICROSOFT-RPM-GPG-KEY
gpgcheck=1
repo_gpgcheck=1
enabled=1
"""


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "project.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_full_config(tmp_path):
    (tmp_path / "base.repo").write_text(REPO_FILE, encoding="utf-8")
    path = write_config(
        tmp_path,
        """
project:
  name: edge-minimal
ecosystem: azl
catalogs:
  - path: catalogs/base.json
    repository: Azure Linux Official Base
  - https://mirror.example.com/snapshots/extras.json
packages:
  - systemd
  - name: openssh-server
    version: 9.6p1-1.azl3
options:
  prefer_same_repository: "no"
  dot_file: graph.dot
  cache_max_age: 3600
repositories:
  - repo_file: base.repo
""",
    )
    config = load_config(path)

    assert config.name == "edge-minimal"
    assert config.ecosystem == "rpm"
    assert config.catalogs[0].path == tmp_path / "catalogs" / "base.json"
    assert config.catalogs[1].url == "https://mirror.example.com/snapshots/extras.json"
    assert [(p.name, p.version) for p in config.packages] == [("systemd", None), ("openssh-server", "9.6p1-1.azl3")]
    assert config.options.prefer_same_repository is False
    assert config.options.dot_file == "graph.dot"
    assert config.options.cache_max_age == 3600.0
    assert config.repositories[0].gpgcheck is True
    assert config.repositories[0].url.endswith("/base/x86_64")


def test_defaults(tmp_path):
    path = write_config(tmp_path, "catalogs: [catalog.json]\npackages: [bash]\n")
    config = load_config(path)
    assert config.name == "project"
    assert config.ecosystem == "deb"
    assert config.options.prefer_same_repository is True
    assert config.repositories == []


def test_disabled_repository_catalogs_are_skipped(tmp_path):
    path = write_config(
        tmp_path,
        """
catalogs:
  - {path: main.json, repository: main}
  - {path: backports.json, repository: backports}
  - {path: local.json}
packages: [bash]
repositories:
  - {name: main, url: http://deb.debian.org/debian}
  - {name: backports, url: http://deb.debian.org/debian, enabled: false}
""",
    )
    enabled = load_config(path).enabled_catalogs()
    assert [source.path.name for source in enabled] == ["main.json", "local.json"]


@pytest.mark.parametrize(
    "text, message",
    [
        ("- just\n- a list\n", "mapping"),
        ("packages: [bash]\n", "catalogs"),
        ("catalogs: [c.json]\npackages: []\n", "packages"),
        ("catalogs: [c.json]\npackages: [bash]\necosystem: pacman\n", "pacman"),
        ("catalogs: [{name: nothing}]\npackages: [bash]\n", "path"),
        ("catalogs: [c.json]\npackages: [{version: '1.0'}]\n", "name"),
        ("catalogs: [c.json\n", "Invalid"),
    ],
)
def test_invalid_configs(tmp_path, text, message):
    with pytest.raises(ValueError, match=message):
        load_config(write_config(tmp_path, text))


class TestParseRepoFile:
    def test_first_section(self):
        repo = parse_repo_file(REPO_FILE)
        assert repo.section == "azurelinux-official-base"
        assert repo.name == "Azure Linux Official Base"
        assert repo.gpgcheck and repo.repo_gpgcheck and repo.enabled
        assert repo.gpgkey == "file:///etc/pki/rpm-gpg/MICROSOFT-RPM-GPG-KEY"

    def test_defaults(self):
        repo = parse_repo_file("[local]\nbaseurl=file:///srv/repo\n")
        assert repo.name == "local"
        assert repo.enabled is True
        assert repo.gpgcheck is False

    @pytest.mark.parametrize("text", ["", "baseurl=http://x\n", "[broken\n"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_repo_file(text)

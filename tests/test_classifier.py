"""Tests for file-name classification and the label helpers."""

import pytest

from assetpick.resolve.classifier import (
    arch_label,
    classify_arch,
    classify_libc,
    classify_platform,
    platform_label,
)
from assetpick.resolve.interfaces import Arch, Libc, Platform

pytestmark = [pytest.mark.unit, pytest.mark.engine]


class TestClassifyPlatform:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("app-windows-x64.zip", Platform.WINDOWS),
            ("app-win-x64.zip", Platform.WINDOWS),
            ("app_win64.exe", Platform.WINDOWS),
            ("app-win32.msi", Platform.WINDOWS),
            ("ripgrep-14.1.0-x86_64-pc-windows-msvc.zip", Platform.WINDOWS),
            ("app-darwin-arm64.tar.gz", Platform.MACOS),
            ("app-macos-arm64.dmg", Platform.MACOS),
            ("app-osx-x64.tar.gz", Platform.MACOS),
            ("ripgrep-14.1.0-aarch64-apple-darwin.tar.gz", Platform.MACOS),
            ("app-linux-x64.tar.gz", Platform.LINUX),
            ("app_linux64.tar.gz", Platform.LINUX),
            ("ripgrep-14.1.0-x86_64-unknown-linux-musl.tar.gz", Platform.LINUX),
        ],
    )
    def test_recognizes_os_tokens(self, name, expected):
        assert classify_platform(name) is expected

    def test_is_case_insensitive(self):
        assert classify_platform("App-Windows-X64.ZIP") is Platform.WINDOWS
        assert classify_platform("APP-LINUX.TAR.GZ") is Platform.LINUX

    def test_win_inside_darwin_is_not_windows(self):
        """'darwin' ends in 'win' but must classify as macOS."""
        assert classify_platform("tool-darwin.tar.gz") is Platform.MACOS

    @pytest.mark.parametrize(
        "name", ["winter-sale.zip", "twin-engine.tar.gz", "kwinrc.tar.gz"]
    )
    def test_embedded_win_is_not_a_token(self, name):
        assert classify_platform(name) is Platform.UNKNOWN

    def test_windows_wins_over_later_rules(self):
        """First match wins: a name with both windows and linux tokens is Windows."""
        assert classify_platform("app-windows-linux-compat.zip") is Platform.WINDOWS

    @pytest.mark.parametrize(
        "name", ["app.tar.gz", "source-code.zip", "", "checksums.txt"]
    )
    def test_unrecognized_names_are_unknown(self, name):
        assert classify_platform(name) is Platform.UNKNOWN


class TestClassifyArch:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("app-linux-x86_64.tar.gz", Arch.X64),
            ("app-linux-x86-64.tar.gz", Arch.X64),
            ("app-linux-amd64.tar.gz", Arch.X64),
            ("app-windows-x64.zip", Arch.X64),
            ("app-darwin-arm64.tar.gz", Arch.ARM64),
            ("app-darwin-aarch64.tar.gz", Arch.ARM64),
            ("app-linux-386.tar.gz", Arch.X86),
            ("app-linux-i386.tar.gz", Arch.X86),
            ("app-linux-i686.tar.gz", Arch.X86),
            ("app-windows-x86_32.zip", Arch.X86),
            ("app-macos-universal.dmg", Arch.UNIVERSAL),
            ("app-all.zip", Arch.UNIVERSAL),
        ],
    )
    def test_recognizes_arch_tokens(self, name, expected):
        assert classify_arch(name) is expected

    def test_arm64_is_checked_before_x64(self):
        assert classify_arch("app-arm64-x64-bundle.zip") is Arch.ARM64

    def test_classification_is_independent_of_platform(self):
        assert classify_arch("app-amd64.deb") is Arch.X64
        assert classify_platform("app-amd64.deb") is Platform.UNKNOWN

    @pytest.mark.parametrize("name", ["app.tar.gz", "install.sh", "smallapp.zip"])
    def test_unrecognized_names_are_unknown(self, name):
        assert classify_arch(name) is Arch.UNKNOWN


class TestClassifyLibc:
    def test_musl(self):
        assert classify_libc("app-x86_64-unknown-linux-musl.tar.gz") is Libc.MUSL

    def test_gnu(self):
        assert classify_libc("app-x86_64-unknown-linux-gnu.tar.gz") is Libc.GLIBC
        assert classify_libc("app-linux-glibc-x64.tar.gz") is Libc.GLIBC

    def test_untagged(self):
        assert classify_libc("app-linux-x64.tar.gz") is Libc.UNKNOWN


class TestLabels:
    def test_platform_labels(self):
        assert platform_label(Platform.WINDOWS) == "Windows"
        assert platform_label(Platform.MACOS) == "macOS"
        assert platform_label(Platform.LINUX) == "Linux"
        assert platform_label(Platform.UNKNOWN) == ""

    def test_arch_labels(self):
        assert arch_label(Arch.X64) == "x64"
        assert arch_label(Arch.ARM64) == "ARM64"
        assert arch_label(Arch.X86) == "x86"
        assert arch_label(Arch.UNIVERSAL) == "Universal"
        assert arch_label(Arch.UNKNOWN) == ""

"""bbl: bootstrap a BOSH director on AWS from a local state directory."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("bosh-bootloader")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"

"""SV2 Installer — install and update Stratum V2 mining daemons."""

__version__ = "0.1.0"

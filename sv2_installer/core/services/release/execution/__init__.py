"""
L4 Execution — ``__init__.py`` re-exports all execution functions.

These functions WRITE to the system: downloads, extraction, file
placement, config files, service definitions, subprocess calls.
"""

from sv2_installer.core.services.release.execution.archive import (  # noqa: F401
    extract_archive,
    locate_executables,
)
from sv2_installer.core.services.release.execution.config_writer import (  # noqa: F401
    ensure_data_dir,
    write_bitcoin_conf,
)
from sv2_installer.core.services.release.execution.download import (  # noqa: F401
    download_file,
    verify_checksum,
)
from sv2_installer.core.services.release.execution.environment_file import (  # noqa: F401
    ensure_path_entry,
    persist_environment,
)
from sv2_installer.core.services.release.execution.pipeline import install  # noqa: F401
from sv2_installer.core.services.release.execution.placement import (  # noqa: F401
    place_executables,
    place_files,
)
from sv2_installer.core.services.release.execution.proxy import (  # noqa: F401
    ProxyMethod,
    build_from_source,
    install_prebuilt,
)
from sv2_installer.core.services.release.execution.service_unit import (  # noqa: F401
    ServiceSpec,
    register_service,
    write_service,
)
from sv2_installer.core.services.release.execution.subprocess_runner import (  # noqa: F401
    run_command,
)

import re
import logging
from pathlib import Path
from typing import Optional

from ..api.archive import ElibzArchive, ElibzArchiveError
from ..config import ConverterConfig, DEFAULT_CONFIG
from .footprint_converter import FootprintConverter


logger = logging.getLogger(__name__)


FOOTPRINT_EXTENSION = ".kicad_mod"

STATUS_SUCCESS = "Parsed successfully"
STATUS_WRITE_FAILED = "Failed to write footprint file"
STATUS_SYMBOL_SKIPPED = "Symbol conversion skipped"
STATUS_SYMBOL_UNSUPPORTED = "Symbol conversion not supported"
STATUS_FOOTPRINT_SKIPPED = "Footprint conversion skipped"


def sanitize_file_name(name: str) -> str:
    name = re.sub(r'[\\/:*?"<>|]', '_', name).strip()
    return name or "Footprint"


def process_elib_file(
    elibz_file: str,
    output_dir: str,
    kicad_sym_file: str = "",
    config: ConverterConfig = DEFAULT_CONFIG
) -> str:
    """
    Convert the footprint of an .elibz archive into output_dir.

    Returns one status message. Fatal problems (unreadable archive, missing
    members, write failure) return their description instead.
    """
    logger.info(f"Processing {elibz_file}")

    try:
        contents = ElibzArchive(elibz_file).read()
    except ElibzArchiveError as e:
        logger.error(f"Archive error: {e}")
        return str(e)

    if kicad_sym_file:
        # the .esym decoder is not implemented
        symbol_status = STATUS_SYMBOL_UNSUPPORTED
    else:
        symbol_status = STATUS_SYMBOL_SKIPPED

    if output_dir:
        footprint_status = convert_footprint(
            contents.footprint_data, output_dir, contents.footprint_title, config
        )
        if footprint_status is None:
            return STATUS_WRITE_FAILED
    else:
        footprint_status = STATUS_FOOTPRINT_SKIPPED

    return f"{STATUS_SUCCESS}\n{symbol_status}\n{footprint_status}"


def convert_footprint(
    efoo_content: str,
    output_dir: str,
    footprint_title: str,
    config: ConverterConfig = DEFAULT_CONFIG
) -> Optional[str]:
    """Convert an .efoo stream and write it; None when the write fails."""
    result = FootprintConverter(config).convert(efoo_content, footprint_title)

    output_path = Path(output_dir) / f"{sanitize_file_name(footprint_title)}{FOOTPRINT_EXTENSION}"
    try:
        output_path.write_text(result.content, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write {output_path}: {e}")
        return None

    logger.info(f"Saved footprint: {output_path}")
    return f"{result.name} converted, unparsed records: {result.unparsed}"

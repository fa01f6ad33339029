"""
Species groups assigned by the KERNO train classifier.
"""

from types import MappingProxyType

from .formats import FileFormat

NBHF = 'NBHF'            # narrow-band high-frequency cetaceans (porpoises)
OTHER_CET = 'OtherCet'
UNCLASSED = 'Unclassed'
SONAR = 'Sonar'

SPECIES_GROUPS = (NBHF, OTHER_CET, UNCLASSED, SONAR)

# FP3 uses a 2-bit code
FPOD_SPECIES_CODES = MappingProxyType({
    0: NBHF,
    1: OTHER_CET,
    2: UNCLASSED,
    3: SONAR,
})

# CP3 codes pair up onto the same four groups
CPOD_SPECIES_CODES = MappingProxyType({
    0: NBHF,
    1: NBHF,
    2: OTHER_CET,
    3: OTHER_CET,
    4: UNCLASSED,
    5: UNCLASSED,
    6: SONAR,
    7: SONAR,
})


def species_from_code(code: int, fmt: FileFormat) -> str:
    """
    Map a classifier species code to its group label.

    Only classified formats carry species codes. Any code outside the
    format's range, or any code from a raw format, gives an empty label.
    """
    if fmt is FileFormat.FP3:
        return FPOD_SPECIES_CODES.get(code, '')
    if fmt is FileFormat.CP3:
        return CPOD_SPECIES_CODES.get(code, '')
    return ''

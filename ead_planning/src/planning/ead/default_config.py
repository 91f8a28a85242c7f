from ead_planning.src.planning.ead.ead_config import EadConfig

DEFAULT_EAD_CONFIG = EadConfig()

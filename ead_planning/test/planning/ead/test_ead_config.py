import pytest

from ead_planning.src.exceptions import InvalidEadConfiguration
from ead_planning.src.global_constants import MPH_TO_MPS, EAD_DEFAULT_SPEED_LIMIT, EAD_DEFAULT_TIME_BUFFER
from ead_planning.src.planning.ead.default_config import DEFAULT_EAD_CONFIG
from ead_planning.src.planning.ead.ead_config import EadConfig


def test_init_defaults_operatingSpeedIsSpeedLimit():
    assert DEFAULT_EAD_CONFIG.speed_limit == pytest.approx(EAD_DEFAULT_SPEED_LIMIT)
    assert DEFAULT_EAD_CONFIG.operating_speed == DEFAULT_EAD_CONFIG.speed_limit
    assert DEFAULT_EAD_CONFIG.fractional_max_accel == pytest.approx(0.75 * DEFAULT_EAD_CONFIG.max_accel)


@pytest.mark.parametrize('kwargs', [
    dict(max_accel=0.0),
    dict(max_accel=-2.0),
    dict(lag_time=-0.1),
    dict(time_buffer=-1.0),
    dict(coarse_time_increment=0.0),
    dict(fine_speed_increment=float('nan')),
    dict(speed_limit=float('inf')),
    dict(fractional_accel_ratio=1.5),
    dict(speed_limit=10.0, operating_speed=12.0),
    dict(operating_speed=2.0, crawling_speed=2.0),
    dict(max_phase_cycles=0),
    dict(max_phase_cycles=2.5),
    dict(max_neighbors_per_expansion=0),
])
def test_init_physicallyMeaninglessValues_raisesInvalidEadConfiguration(kwargs):
    with pytest.raises(InvalidEadConfiguration):
        EadConfig(**kwargs)


def test_init_zeroLagAndBuffer_valid():
    config = EadConfig(lag_time=0.0, time_buffer=0.0)

    assert config.lag_time == 0.0
    assert config.time_buffer == 0.0


def test_fromParams_speedsInMph_convertedToMetersPerSecond():
    config = EadConfig.from_params({'maximumSpeed': 45.0, 'defaultSpeed': 30.0, 'crawlingSpeed': 4.0,
                                    'defaultAccel': 1.5, 'ead.response.lag': 1.2, 'ead.use_fine_pass': False})

    assert config.speed_limit == pytest.approx(45.0 / MPH_TO_MPS)
    assert config.operating_speed == pytest.approx(30.0 / MPH_TO_MPS)
    assert config.crawling_speed == pytest.approx(4.0 / MPH_TO_MPS)
    assert config.max_accel == 1.5
    assert config.lag_time == 1.2
    assert config.use_fine_pass is False


def test_fromParams_missingKeys_defaults():
    config = EadConfig.from_params({})

    assert config.speed_limit == pytest.approx(EAD_DEFAULT_SPEED_LIMIT)
    assert config.operating_speed == pytest.approx(config.speed_limit)
    assert config.time_buffer == EAD_DEFAULT_TIME_BUFFER
    assert config.use_fine_pass is True


def test_fromParams_defaultSpeedAboveMaximum_raisesInvalidEadConfiguration():
    with pytest.raises(InvalidEadConfiguration):
        EadConfig.from_params({'maximumSpeed': 25.0, 'defaultSpeed': 30.0})

import pytest

from ead_planning.src.planning.ead.node import Node


def test_fromRealUnits_wholeValues_convertedToInternalUnits():
    node = Node.from_real_units(200.0, 14.4, 15.0)

    assert node.distance == 2000
    assert node.time == 144
    assert node.speed == 150


def test_fromRealUnits_halfUnit_roundsUp():
    node = Node.from_real_units(0.25, 1.25, -0.25)

    assert node.distance == 3
    assert node.time == 13
    # half-up rounds toward positive infinity
    assert node.speed == -2


def test_asDouble_internalUnits_convertedBackToRealUnits():
    node = Node.from_internal_units(15, 37, 42)

    assert node.distance_as_double == pytest.approx(1.5)
    assert node.time_as_double == pytest.approx(3.7)
    assert node.speed_as_double == pytest.approx(4.2)


def test_fromRealUnits_valueOnTheGrid_roundTripIsExact():
    node = Node.from_real_units(123.4, 56.7, 8.9)

    assert Node.from_real_units(node.distance_as_double, node.time_as_double, node.speed_as_double) == node


def test_eq_sameStateDifferentConstruction_equalWithEqualHashes():
    from_real = Node.from_real_units(1.0, 2.0, 3.0)
    from_internal = Node.from_internal_units(10, 20, 30)

    assert from_real == from_internal
    assert hash(from_real) == hash(from_internal)
    assert len({from_real, from_internal}) == 1


def test_eq_anyComponentDiffers_notEqual():
    node = Node.from_internal_units(10, 20, 30)

    assert node != Node.from_internal_units(11, 20, 30)
    assert node != Node.from_internal_units(10, 21, 30)
    assert node != Node.from_internal_units(10, 20, 31)
    assert node != (10, 20, 30)


def test_eq_valuesWithinHalfUnit_quantizedToSameNode():
    assert Node.from_real_units(100.01, 10.04, 12.03) == Node.from_real_units(99.98, 9.96, 11.97)


def test_setattr_anyAttribute_raisesAttributeError():
    node = Node.from_internal_units(10, 20, 30)

    with pytest.raises(AttributeError):
        node._distance = 11
    with pytest.raises(AttributeError):
        node.new_attribute = 1

    assert node.distance == 10


def test_resolution_defaultUnits_tenthOfRealUnits():
    assert Node.distance_resolution() == pytest.approx(0.1)
    assert Node.time_resolution() == pytest.approx(0.1)
    assert Node.speed_resolution() == pytest.approx(0.1)


def test_repr_node_showsInternalUnits():
    assert repr(Node.from_internal_units(2000, 144, 150)) == "Node{distance=    2000, time=   144, speed= 150}"

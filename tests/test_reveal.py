"""Unit tests for the reveal-more controller."""

from skyfare.search.models import AggregationState, Airline, FilterConfiguration, Leg, NormalizedFlight
from skyfare.search.reveal import (
    RevealController,
    apply_capabilities,
    can_reveal_more,
    initial_configuration,
    relax,
)


def _flight(flight_id: str, airline: Airline = Airline.VJ, stops: int = 0, baggage_type: str = "") -> NormalizedFlight:
    return NormalizedFlight(
        id=flight_id,
        airline=airline,
        price=100.0,
        departure=Leg(airport="SGN", date="2025-03-01", time="06:00", stops=stops),
        duration="2h",
        baggage_type=baggage_type,
    )


class TestTransitions:
    """Tests for the pure relaxation functions."""

    def test_initial_configuration(self) -> None:
        config = initial_configuration([Airline.VJ])
        assert config.airlines == frozenset({Airline.VJ})
        assert config.cheapest_only is True
        assert config.direct_flights_only is True
        assert config.two_bag_only is True
        assert can_reveal_more(config)

    def test_relax_order_and_terminal_no_op(self) -> None:
        s0 = initial_configuration(Airline)
        s1 = relax(s0)
        assert (s1.cheapest_only, s1.direct_flights_only) == (False, True)
        s2 = relax(s1)
        assert (s2.cheapest_only, s2.direct_flights_only) == (False, False)
        assert not can_reveal_more(s2)
        assert relax(s2) == s2

    def test_relax_leaves_two_bag_alone(self) -> None:
        config = initial_configuration(Airline)
        for _ in range(3):
            config = relax(config)
        assert config.two_bag_only is True

    def test_relax_from_direct_only(self) -> None:
        config = FilterConfiguration(direct_flights_only=True)
        assert relax(config).direct_flights_only is False


class TestCapabilities:
    """Tests for capability-based auto-downgrade."""

    def test_no_direct_flights_turns_direct_off(self) -> None:
        config = initial_configuration(Airline)
        flights = [_flight("a", stops=1), _flight("b", Airline.VNA, stops=2, baggage_type="VFR")]
        adjusted = apply_capabilities(config, flights)
        assert adjusted.direct_flights_only is False
        assert adjusted.two_bag_only is True
        assert adjusted.cheapest_only is True

    def test_no_vfr_fare_turns_two_bag_off(self) -> None:
        config = initial_configuration(Airline)
        flights = [_flight("a", Airline.VJ), _flight("b", Airline.VNA, baggage_type="ECO")]
        adjusted = apply_capabilities(config, flights)
        assert adjusted.two_bag_only is False
        assert adjusted.direct_flights_only is True

    def test_capable_result_set_is_unchanged(self) -> None:
        config = initial_configuration(Airline)
        flights = [_flight("a"), _flight("b", Airline.VNA, baggage_type="VFR")]
        assert apply_capabilities(config, flights) is config

    def test_empty_result_set_turns_both_off(self) -> None:
        adjusted = apply_capabilities(initial_configuration(Airline), [])
        assert adjusted.direct_flights_only is False
        assert adjusted.two_bag_only is False


class TestRevealController:
    """Tests for the stateful controller."""

    def test_advance_sequence(self) -> None:
        controller = RevealController()
        assert controller.more_available
        controller.advance()
        assert controller.config.cheapest_only is False
        assert controller.more_available
        controller.advance()
        assert not controller.more_available
        before = controller.config
        controller.advance()
        assert controller.config == before

    def test_observe_ignores_pending_state(self) -> None:
        controller = RevealController()
        state = AggregationState(pending={Airline.VNA}, accumulated=[_flight("a", stops=1)])
        controller.observe(state)
        assert controller.config.direct_flights_only is True

    def test_observe_applies_once_per_session(self) -> None:
        controller = RevealController()
        state = AggregationState(succeeded={Airline.VJ}, accumulated=[_flight("a", stops=1)])
        controller.observe(state)
        assert controller.config.direct_flights_only is False

        # A user re-enabling the filter is not overridden by the same result set
        controller.config = controller.config.with_changes(direct_flights_only=True)
        controller.observe(state)
        assert controller.config.direct_flights_only is True

    def test_reset_starts_fresh(self) -> None:
        controller = RevealController()
        state = AggregationState(succeeded={Airline.VJ}, accumulated=[_flight("a", stops=1)])
        controller.observe(state)
        controller.advance()
        controller.reset([Airline.VNA])
        assert controller.config == initial_configuration([Airline.VNA])
        controller.observe(state)
        assert controller.config.direct_flights_only is False

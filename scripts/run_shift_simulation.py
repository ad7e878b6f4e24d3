import os
import random
import time

from offers.models import Action, Feedback, OfferInput
from offers.scorer import format_recommendation_for_display
from offers.service import OfferAdvisor
from storage.database import DriverDatabase
from tracking.shift import ShiftTracker
from zones.registry import get_zone_by_id

SAMPLE_INTERVAL_MS = 10_000


class SimulatedClock:
    """
    Epoch-ms clock the simulation advances by hand.
    """

    def __init__(self, start_ms):
        self.now = start_ms

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


def interpolate(start, end, steps):
    for step in range(steps + 1):
        fraction = step / steps
        yield (
            start[0] + (end[0] - start[0]) * fraction,
            start[1] + (end[1] - start[1]) * fraction,
        )


def simulated_route(zone_ids, samples_per_leg=12, samples_in_zone=8):
    """
    GPS path visiting each zone centroid in turn, lingering at every stop.
    """
    centers = [get_zone_by_id(zone_id).center for zone_id in zone_ids]
    for index, center in enumerate(centers):
        for _ in range(samples_in_zone):
            yield center
        if index + 1 < len(centers):
            yield from interpolate(center, centers[index + 1], samples_per_leg)


def random_offer(pickup_zone, dest_zones):
    eta = random.randint(8, 35)
    return OfferInput.new(
        platform=random.choice(["uber", "bolt", "freenow"]),
        pickup_zone=pickup_zone,
        dest_zone=random.choice(dest_zones),
        fare=round(random.uniform(1.2, 2.6) * eta, 2),
        eta_minutes=eta,
        surge_flag=random.random() < 0.1,
    )


def run_simulation(route=("stare-miasto", "kazimierz", "podgorze", "debniki"), offer_every=6, seed=7):
    print("=== STARTING SHIFT SIMULATION ===")
    random.seed(seed)

    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    db_path = os.path.join(base_dir, "shift_simulation.db")
    output_path = os.path.join(base_dir, "shift_offers.csv")
    if os.path.exists(db_path):
        os.remove(db_path)

    clock = SimulatedClock(int(time.time() * 1000))

    with DriverDatabase(f"sqlite:///{db_path}", clock=clock) as db:
        tracker = ShiftTracker(db)
        advisor = OfferAdvisor(db)

        state = tracker.start_shift()
        print(f"Shift started (session {state.session.id}).\n")

        offers_seen = 0
        for sample_index, (lat, lng) in enumerate(simulated_route(list(route))):
            clock.advance(SAMPLE_INTERVAL_MS)
            previous_zone = state.current_zone_id
            state = tracker.handle_location(lat, lng, accuracy_m=random.uniform(5, 40))

            if state.current_zone_id != previous_zone and state.current_zone_id:
                print(f"[ZONE] Entered {state.current_zone_name}")

            if not state.current_zone_id or sample_index % offer_every:
                continue

            offer = random_offer(state.current_zone_id, list(route))
            saved = advisor.evaluate_and_save(offer, session_id=state.session.id)
            display = format_recommendation_for_display(saved.score.recommendation)
            offers_seen += 1
            print(
                f"  Offer {offers_seen}: {offer.platform.value} {offer.fare:.2f} PLN / {offer.eta_minutes:.0f} min "
                f"-> {offer.dest_zone} | {display.primary_action} ({display.confidence_label})"
            )

            if saved.offer is None:
                continue

            # Simulation: the driver follows TAKE advice most of the time
            followed = saved.score.recommendation.action == Action.TAKE or random.random() < 0.5
            feedback = Feedback.FOLLOWED if followed else Feedback.IGNORED
            advisor.record_feedback(
                saved.offer.id,
                feedback,
                actual_fare=round(offer.fare * random.uniform(0.9, 1.1), 2),
                actual_duration_min=offer.eta_minutes + random.randint(-3, 5),
            )

        idle = advisor.idle(state.current_zone_id, tracker.dwell_minutes())
        print(f"\nIdle advice in {state.current_zone_name}: {format_recommendation_for_display(idle).secondary_text}")

        counters = advisor.money_proof()
        session_id = state.session.id
        tracker.stop_shift()
        dwells = db.get_dwells_for_session(session_id)

        with open(output_path, "w", newline="") as file:
            file.write(db.export_offers_csv())

    print("\n=== SIMULATION COMPLETE ===")
    print(f"Zone dwells recorded: {len(dwells)}")
    for dwell in dwells:
        print(f"  {dwell.zone_id}: {dwell.distance_est_km:.2f} km")
    print(f"Offers scored: {offers_seen}")
    print(f"Baseline: {counters.baseline_hourly:.1f} PLN/h over {counters.baseline_count} offers")
    print(f"Followed: {counters.followed_hourly:.1f} PLN/h over {counters.followed_count} offers")
    print("Results written to 'shift_offers.csv'.")


if __name__ == "__main__":
    run_simulation()

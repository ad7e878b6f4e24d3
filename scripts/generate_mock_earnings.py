import os
import uuid
from datetime import datetime, timedelta

import numpy as np
import pandas as pd

from scoring.context import resolve_context
from scoring.demo import DemoDataset
from scoring.models import PLATFORMS
from zones.registry import KRAKOW_ZONES


def generate_mock_earnings(num_logs=300, days=60, seed=None, output_file="sampledata/earnings_logs.csv"):
    """
    Generates a driver trip log shaped like the demo benchmarks.
    Each trip picks a random zone, platform and moment in the last `days` days,
    then draws its fare and duration around the demo record for that bucket,
    so personal-mode scoring has realistic per-bucket spreads to work with.
    """
    rng = np.random.default_rng(seed)
    demo = DemoDataset(seed=seed)
    now = datetime.now()

    data = []
    for _ in range(num_logs):
        zone = KRAKOW_ZONES[rng.integers(0, len(KRAKOW_ZONES))]
        platform = PLATFORMS[rng.integers(0, len(PLATFORMS))]

        moment = now - timedelta(minutes=int(rng.integers(0, days * 24 * 60)))
        context = resolve_context(moment)
        record = demo.record_for(platform, zone.category, context.day_mode, context.time_regime)

        # Roughly 1 in 5 manual entries skip the duration field
        duration = None
        if rng.random() > 0.2:
            duration = int(max(5, rng.normal(record.avg_trip_duration, 4)))

        data.append({
            "id": str(uuid.uuid4()),
            "platform": platform.value,
            "amount": np.round(max(8.0, rng.normal(record.avg_trip_amount, record.avg_trip_amount * 0.2)), 2),
            "zone": zone.id,
            "duration": duration,
            "timestamp": int(moment.timestamp() * 1000),
            "time_regime": context.time_regime.value,
            "day_mode": context.day_mode.value,
        })

    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    absolute_path = os.path.join(base_dir, output_file)
    os.makedirs(os.path.dirname(absolute_path), exist_ok=True)

    df = pd.DataFrame(data)
    df["duration"] = df["duration"].astype("Int64")
    df.to_csv(absolute_path, index=False)
    print(f"✅ Generated {num_logs} earnings logs and saved to '{output_file}'")

    print("\nTop 5 Zones (Personal-mode coverage):")
    counts = df["zone"].value_counts().head(5)
    for zone_id, count in counts.items():
        print(f"  {zone_id}: {count} trips")

    print("\nAverage fare per platform:")
    for platform, amount in df.groupby("platform")["amount"].mean().items():
        print(f"  {platform}: {amount:.2f} PLN")

    return df


if __name__ == "__main__":
    generate_mock_earnings(num_logs=300, days=60)

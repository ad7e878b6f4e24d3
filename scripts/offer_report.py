import io
import os
import sys

import pandas as pd

from storage.database import DriverDatabase


def load_offers(db_path):
    with DriverDatabase(f"sqlite:///{db_path}") as db:
        exported = db.export_offers_csv()
    return pd.read_csv(io.StringIO(exported))


def offer_report(db_path="shift_simulation.db", output_file="offer_report.csv"):
    """
    Per-bucket summary of logged offers: how many, average fare/eta,
    implied PLN/h and how often the driver followed the advice.
    """
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    df = load_offers(os.path.join(base_dir, db_path))

    if df.empty:
        print("No offers logged yet.")
        return df

    df["hourly"] = df["fare"] / df["etaMinutes"] * 60
    df["followed"] = df["feedback"] == "FOLLOWED"

    summary = (
        df.groupby(["destZone", "timeRegime", "dayType", "platform"])
        .agg(
            offers=("id", "count"),
            avg_fare=("fare", "mean"),
            avg_eta=("etaMinutes", "mean"),
            avg_hourly=("hourly", "mean"),
            followed_share=("followed", "mean"),
        )
        .round(2)
        .sort_values("offers", ascending=False)
        .reset_index()
    )
    summary.to_csv(os.path.join(base_dir, output_file), index=False)
    print(f"✅ Summarised {len(df)} offers into {len(summary)} buckets, saved to '{output_file}'")

    print("\nRecommendation mix:")
    for action, count in df["recommendation"].fillna("NONE").value_counts().items():
        print(f"  {action}: {count}")

    print("\nTop 5 Buckets:")
    for _, row in summary.head(5).iterrows():
        print(
            f"  {row['destZone']} / {row['timeRegime']} / {row['dayType']} / {row['platform']}: "
            f"{row['offers']} offers, {row['avg_hourly']} PLN/h"
        )
    return summary


if __name__ == "__main__":
    offer_report(*sys.argv[1:2])

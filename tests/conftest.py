import os

# no display in CI - must be set before matplotlib is imported
os.environ.setdefault("MPLBACKEND", "Agg")

import numpy as np
import pandas as pd
import pytest


@pytest.fixture()
def county_frame():
    """12 states x 25 counties, death rate driven by rep share and mask days plus a state effect."""
    rng = np.random.default_rng(0)
    n_states, n_counties = 12, 25

    rows = []
    for s in range(1, n_states + 1):
        state_fips = f"{s:02d}"
        state_effect = rng.normal(0, 15)
        mask_days = rng.uniform(0, 300)
        stay_days = rng.uniform(0, 60)
        business_days = rng.uniform(0, 90)
        restaurant_days = rng.uniform(0, 90)
        for c in range(1, n_counties + 1):
            rep = rng.uniform(20, 85)
            age65 = rng.normal(18, 4)
            density = rng.normal(4, 1.5)
            rows.append({
                "fips": f"{state_fips}{2 * c - 1:03d}",
                "state_fips": state_fips,
                "mask_mandate_days": mask_days,
                "stay_home_days": stay_days,
                "business_close_days": business_days,
                "restaurant_close_days": restaurant_days,
                "rep_share_pct": rep,
                "pct_65_over": age65,
                "log_pop_density": density,
                "death_rate": 100 + 1.5 * rep - 0.2 * mask_days + 2 * age65
                              + state_effect + rng.normal(0, 20),
            })

    return pd.DataFrame(rows)

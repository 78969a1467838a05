"""Synthetic two-phase rocket flight, used for demos and pipeline tests."""

from __future__ import annotations

import numpy as np

from .domain import Observation, ObservationSeries


# Timeline
DURATION_S = 300
TICKS_PER_SECOND = 10   # 0.1 s resolution -> 3001 samples
BURNOUT_S = 150.0   # powered ascent ends here

# Powered ascent
THRUST_ACCEL_MPS2 = 30.0
ENGINE_TEMP_START_C = 800.0
ENGINE_TEMP_RISE_C_PER_S = 2.0

# Coast
GRAVITY_MPS2 = 9.8
ENGINE_TEMP_BURNOUT_C = 1100.0
ENGINE_COOLING_DIVISOR = 50.0

# Noise / injected fault
ALTITUDE_NOISE_M = 10.0     # peak-to-peak, uniform
TEMP_SPIKE_CENTER_S = 120.0
TEMP_SPIKE_HALF_WIDTH_S = 0.5
TEMP_SPIKE_C = 500.0

# Atmosphere
SEA_LEVEL_DENSITY = 1.225   # kg/m^3
SCALE_HEIGHT_M = 8000.0


def generate_profile(seed: int | None = None) -> ObservationSeries:
    """
    Generate a noisy powered-ascent + coast flight profile.

    Channels: altitude, velocity, acceleration, temp_engine, pressure.
    An engine temperature spike is injected around T+120 s so anomaly
    detection always has a true positive.

    Args:
        seed: Optional RNG seed. Without it, output differs run to run.

    Returns:
        3001 Observations at 0.1 s spacing from T+0 to T+300 s
    """
    rng = np.random.default_rng(seed)

    # integer ticks / 10 avoids drift from repeatedly adding 0.1
    ticks = np.arange(DURATION_S * TICKS_PER_SECOND + 1)
    t = ticks / TICKS_PER_SECOND
    n = len(t)

    powered = t < BURNOUT_S
    u = t - BURNOUT_S   # time since burnout (only meaningful when coasting)

    burnout_alt = 0.5 * THRUST_ACCEL_MPS2 * BURNOUT_S**2
    burnout_vel = THRUST_ACCEL_MPS2 * BURNOUT_S

    altitude_clean = np.where(
        powered,
        0.5 * THRUST_ACCEL_MPS2 * t**2,
        burnout_alt + burnout_vel * u - 0.5 * GRAVITY_MPS2 * u**2,
    )
    velocity = np.where(powered, THRUST_ACCEL_MPS2 * t, burnout_vel - GRAVITY_MPS2 * u)
    acceleration = np.where(powered, THRUST_ACCEL_MPS2, -GRAVITY_MPS2) + rng.random(n)

    noise = (rng.random(n) - 0.5) * ALTITUDE_NOISE_M
    altitude = np.maximum(0.0, altitude_clean + noise)

    spike = np.where(np.abs(t - TEMP_SPIKE_CENTER_S) < TEMP_SPIKE_HALF_WIDTH_S, TEMP_SPIKE_C, 0.0)
    temp_engine = np.where(
        powered,
        ENGINE_TEMP_START_C + ENGINE_TEMP_RISE_C_PER_S * t + spike,
        ENGINE_TEMP_BURNOUT_C - u**2 / ENGINE_COOLING_DIVISOR,
    )

    # q = 1/2 rho v^2, rho decaying exponentially with altitude; Pa -> kPa
    density = SEA_LEVEL_DENSITY * np.exp(-altitude_clean / SCALE_HEIGHT_M)
    pressure = np.maximum(0.0, 0.5 * density * velocity**2 / 1000.0)

    return tuple(
        Observation(
            timestamp=float(t[i]),
            values={
                "altitude": float(altitude[i]),
                "velocity": float(velocity[i]),
                "acceleration": float(acceleration[i]),
                "temp_engine": float(temp_engine[i]),
                "pressure": float(pressure[i]),
            },
        )
        for i in range(n)
    )

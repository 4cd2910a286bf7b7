"""Numerical constants used by the component imager."""

import numpy as np

# Mathematical constants
pi_over_2 = np.pi / 2
sqrt2 = np.sqrt(2.0)

# FWHM of a Gaussian in units of its standard deviation
fwhm_per_sigma = 2.0 * np.sqrt(2.0 * np.log(2.0))
sigma_per_fwhm = 1.0 / fwhm_per_sigma

# Minor axis (pixels) below which a Gaussian is integrated as a 1D ridge
narrow_threshold = 1.0e-3

# Largest Simpson sub-step (pixels) for the 2D pixel integral
max_quadrature_step = 1.0 / 32.0

# Position angles within this distance (rad) of 0 or pi/2 use the exact
# vertical/horizontal ridge intercepts
pa_tolerance = 1.0e-6

# Relative tolerance for the equal pixel-scale check
pixel_scale_rtol = 1.0e-10

# Upper bound on samples held in memory per quadrature chunk
max_chunk_samples = 1 << 20

'''
ftsintensity 1.0

ftsintensity calibrates the intensity of an FTS line spectrum using a
normalised response function, such as the one produced by ftsresponse.

The spectrum is an XGremlin line spectrum:  a raw file of 32-bit floats
(<name>.dat) with a text header (<name>.hdr) giving the wavenumber of the
first point (wstart), the point spacing (delw) and the number of points
(npo). The response function is a text file of (wavenumber, response) pairs.
It is smoothed by a least-squares cubic B-spline with uniform breakpoints,
and every point of the spectrum is divided by the spline at its wavenumber.
Points outside the wavenumber range of the response function are set to
zero. The calibrated spectrum is written with a copy of the input header.

From the command line:

   ftsintensity <spectrum> <response> <output> [<coeffs>]

or from python:

   from ftsintensity import calibrate
   fit = calibrate('spectrum', 'response.txt', 'calibrated', ncoeffs=50)
'''

__version__ = '1.0'

from ftsintensity.header import read_header, SpectrumHeader, HeaderFieldError
from ftsintensity.response import load_response, ResponseFileError
from ftsintensity.utils.fit1dcurve import BsplineFit, InsufficientDataError
from ftsintensity.calibrate import calibrate, calibrate_spectrum, \
      SpectrumFileError, DEFAULT_NUM_COEFFS

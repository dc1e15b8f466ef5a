'''
Intensity calibration of an FTS line spectrum. The normalised response
function is fitted with a cubic B-spline and every point of the spectrum is
divided by the spline evaluated at its wavenumber. Points outside the range
covered by the response function are set to zero.
'''

import os
import warnings
import numpy as num
from ftsintensity.header import read_header, copy_header
from ftsintensity.response import load_response
from ftsintensity.utils.fit1dcurve import BsplineFit, InsufficientDataError

# Default number of fit coefficients
DEFAULT_NUM_COEFFS = 200

# samples read, calibrated and written at a time
blocksize = 65536

dtype = num.float32


class SpectrumFileError(ValueError):
   '''The spectrum data file does not match its header.'''
   pass


def check_spectrum(filename, npo):
   '''Make sure filename can be read and holds at least npo samples.'''
   try:
      size = os.path.getsize(filename)
   except OSError as e:
      raise IOError("Unable to open %s: %s" % (filename, e.strerror))
   need = npo*num.dtype(dtype).itemsize
   if size < need:
      raise SpectrumFileError("%s holds %d bytes, but the header requires "
            "%d points (%d bytes)" % (filename, size, npo, need))

def check_output(infile, outfile):
   '''Refuse to overwrite infile with outfile.'''
   if os.path.exists(outfile):
      same = os.path.samefile(infile, outfile)
   else:
      same = os.path.abspath(infile) == os.path.abspath(outfile)
   if same:
      raise IOError("Output %s would overwrite the input spectrum" % outfile)

def calibrate_spectrum(fit, header, infile, outfile, blocksize=blocksize):
   '''Divide the spectrum in infile by the fitted response and write the
   result to outfile. Both files are raw 32-bit floats.

   Args:
      fit (oneDcurve instance):  the fitted response function
      header (SpectrumHeader):  layout of the spectrum
      infile (str):  the input .dat file
      outfile (str):  the output .dat file
      blocksize (int):  number of samples handled at a time

   Returns:
      int:  number of samples written (header.npo)
   '''
   npo = header.npo
   check_spectrum(infile, npo)
   check_output(infile, outfile)
   nbad = 0
   with open(infile, 'rb') as fin:
      try:
         fout = open(outfile, 'wb')
      except IOError as e:
         raise IOError("Unable to write to %s: %s" % (outfile, e.strerror))
      # a partial output is not left behind
      try:
         with fout:
            for i0 in range(0, npo, blocksize):
               m = min(blocksize, npo - i0)
               raw = num.fromfile(fin, dtype=dtype, count=m)
               if raw.shape[0] != m:
                  raise SpectrumFileError("Unexpected end of %s at point %d" \
                        % (infile, i0 + raw.shape[0]))
               # Only points within the spline range are calibrated
               ySpline,mask = fit(header.abscissa(num.arange(i0, i0 + m)))
               yCal = num.zeros(m, dtype=dtype)
               with num.errstate(divide='ignore', invalid='ignore'):
                  yCal[mask] = raw[mask]/ySpline[mask].astype(dtype)
               nbad += int(num.sum(~num.isfinite(yCal)))
               yCal.tofile(fout)
      except Exception:
         os.remove(outfile)
         raise
   if nbad:
      warnings.warn("%d calibrated points of %s are not finite" % \
            (nbad, outfile), RuntimeWarning)
   return npo

def calibrate(spectrum, response, output, ncoeffs=DEFAULT_NUM_COEFFS,
      verbose=True, plotfile=None):
   '''Calibrate the intensity of an XGremlin line spectrum.

   Args:
      spectrum (str):  base name of the spectrum (without .dat/.hdr)
      response (str):  file holding the normalised response function
      output (str):  base name of the calibrated spectrum
      ncoeffs (int):  number of spline fit coefficients
      verbose (bool or int):  print progress. If > 1, also echo the
                              response function.
      plotfile (str):  if given, save a plot of the response fit here

   Returns:
      BsplineFit instance:  the fitted response function
   '''
   SpectrumDAT = spectrum + '.dat'
   SpectrumHDR = spectrum + '.hdr'
   CalDAT = output + '.dat'
   CalHDR = output + '.hdr'

   if verbose: print("Spline Coefficients : %d" % ncoeffs)
   header = read_header(SpectrumHDR)
   if verbose:
      print("XGremlin variables  : wstart %g, wstop %g, delw %g, npo %d" % \
            (header.wstart, header.wstop, header.delw, header.npo))
   check_spectrum(SpectrumDAT, header.npo)
   check_output(SpectrumDAT, CalDAT)
   check_output(SpectrumHDR, CalHDR)

   x,y = load_response(response, verbose=(verbose > 1))
   if len(x) <= ncoeffs:
      raise InsufficientDataError("There must be more data points in %s "
            "than spline fit coefficients." % response)
   if verbose: print("\nConstructing spline ... ", end='', flush=True)
   fit = BsplineFit(x, y, ncoeffs=ncoeffs)
   if verbose: fit.summary()
   if plotfile is not None:
      fit.plot(outfile=plotfile, xlabel='wavenumber', ylabel='response')

   if verbose: print("Calibrating spectrum ... ", end='', flush=True)
   calibrate_spectrum(fit, header, SpectrumDAT, CalDAT)
   if verbose: print("done")

   copy_header(SpectrumHDR, CalHDR)
   return fit

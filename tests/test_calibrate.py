import os
import pytest
import numpy as num
from numpy import linspace, sin, pi, all, absolute, isinf, fromfile, float32
from ftsintensity.calibrate import calibrate, calibrate_spectrum, \
      SpectrumFileError
from ftsintensity.header import read_header
from ftsintensity.utils.fit1dcurve import BsplineFit, InsufficientDataError

def response(x):
   return 0.5 + 0.3*sin(2*pi*(x - 995)/40.)

def read_dat(base):
   return fromfile(base + '.dat', dtype=float32)

def test_calibrate(make_spectrum, make_response, tmp_path):
   base,data = make_spectrum(wstart=1000.0, delw=0.001, npo=10000)
   x = linspace(995, 1015, 500)
   resp = make_response(x, response(x))
   out = str(tmp_path / 'cal')
   fit = calibrate(base, resp, out, ncoeffs=50, verbose=False)
   assert isinstance(fit, BsplineFit)
   assert os.path.getsize(out + '.dat') == 10000*4
   cal = read_dat(out)
   assert cal.shape == (10000,)
   q = num.arange(10000)*0.001 + 1000.0
   assert all(absolute(cal*response(q)/data - 1) < 1e-4)
   with open(base + '.hdr', 'rb') as f1, open(out + '.hdr', 'rb') as f2:
      assert f1.read() == f2.read()

def test_unit_response(make_spectrum, make_response, tmp_path):
   base,data = make_spectrum(wstart=1000.0, delw=0.01, npo=1000)
   x = linspace(990, 1020, 300)
   resp = make_response(x, x*0 + 1.0)
   out = str(tmp_path / 'cal')
   calibrate(base, resp, out, ncoeffs=20, verbose=False)
   cal = read_dat(out)
   assert all(absolute(cal - data) <= 1e-6*absolute(data))

def test_out_of_range(make_spectrum, make_response, tmp_path):
   base,data = make_spectrum(wstart=1000.0, delw=0.01, npo=1000)
   x = linspace(1002, 1005, 200)
   resp = make_response(x, response(x))
   out = str(tmp_path / 'cal')
   fit = calibrate(base, resp, out, ncoeffs=20, verbose=False)
   cal = read_dat(out)
   assert cal.shape == (1000,)
   q = num.arange(1000)*0.01 + 1000.0
   inside = (q >= fit.xmin)*(q <= fit.xmax)
   assert all(cal[~inside] == 0.0)
   assert all(cal[inside] > 0)
   assert num.sum(inside) > 250

def test_blocksize(make_spectrum, make_response, tmp_path):
   base,data = make_spectrum(wstart=1000.0, delw=0.01, npo=1000)
   x = linspace(995, 1015, 200)
   fit = BsplineFit(x, response(x), ncoeffs=20)
   header = read_header(base + '.hdr')
   out1 = str(tmp_path / 'a.dat')
   out2 = str(tmp_path / 'b.dat')
   assert calibrate_spectrum(fit, header, base + '.dat', out1) == 1000
   assert calibrate_spectrum(fit, header, base + '.dat', out2,
         blocksize=7) == 1000
   assert all(fromfile(out1, dtype=float32) == fromfile(out2, dtype=float32))

def test_zero_response(make_spectrum, make_response, tmp_path):
   base,data = make_spectrum(wstart=1000.0, delw=0.01, npo=100)
   x = linspace(995, 1015, 50)
   resp = make_response(x, x*0)
   out = str(tmp_path / 'cal')
   with pytest.warns(RuntimeWarning):
      calibrate(base, resp, out, ncoeffs=10, verbose=False)
   assert all(isinf(read_dat(out)))

def test_insufficient_data(make_spectrum, make_response, tmp_path):
   base,data = make_spectrum()
   resp = make_response([995.0, 1005.0, 1015.0], [1.0, 1.0, 1.0])
   out = str(tmp_path / 'cal')
   with pytest.raises(InsufficientDataError):
      calibrate(base, resp, out, verbose=False)
   assert not os.path.exists(out + '.dat')
   assert not os.path.exists(out + '.hdr')

def test_short_spectrum(make_spectrum, make_response, tmp_path):
   base,data = make_spectrum(npo=1000)
   data[:-1].tofile(base + '.dat')
   x = linspace(995, 1015, 200)
   resp = make_response(x, response(x))
   out = str(tmp_path / 'cal')
   with pytest.raises(SpectrumFileError):
      calibrate(base, resp, out, ncoeffs=20, verbose=False)
   assert not os.path.exists(out + '.dat')
   assert not os.path.exists(out + '.hdr')

def test_missing_spectrum(make_spectrum, make_response, tmp_path):
   base,data = make_spectrum(npo=100)
   os.remove(base + '.dat')
   x = linspace(995, 1015, 200)
   resp = make_response(x, response(x))
   with pytest.raises(IOError):
      calibrate(base, resp, str(tmp_path / 'cal'), ncoeffs=20, verbose=False)

def test_unwritable_output(make_spectrum, make_response, tmp_path):
   base,data = make_spectrum(npo=100)
   x = linspace(995, 1015, 200)
   resp = make_response(x, response(x))
   out = str(tmp_path / 'nodir' / 'cal')
   with pytest.raises(IOError):
      calibrate(base, resp, out, ncoeffs=20, verbose=False)

def test_progress(make_spectrum, make_response, tmp_path, capsys):
   base,data = make_spectrum(npo=100)
   x = linspace(995, 1015, 200)
   resp = make_response(x, response(x))
   calibrate(base, resp, str(tmp_path / 'cal'), ncoeffs=20)
   out = capsys.readouterr().out
   assert "Spline Coefficients : 20" in out
   assert "XGremlin variables  : wstart 1000, wstop 1000.1, delw 0.001, " \
          "npo 100" in out
   assert "chisq/dof = " in out
   assert "Calibrating spectrum ... done" in out

def test_output_is_input(make_spectrum, make_response, tmp_path):
   base,data = make_spectrum(npo=1000)
   x = linspace(995, 1015, 200)
   resp = make_response(x, response(x))
   with pytest.raises(IOError):
      calibrate(base, resp, base, ncoeffs=20, verbose=False)
   assert all(read_dat(base) == data)
   fit = BsplineFit(x, response(x), ncoeffs=20)
   header = read_header(base + '.hdr')
   with pytest.raises(IOError):
      calibrate_spectrum(fit, header, base + '.dat', base + '.dat')
   assert all(read_dat(base) == data)

class FailingFit:
   '''Behaves like a fitted curve for the first call only.'''

   def __init__(self, fit):
      self.fit = fit
      self.ncalls = 0

   def __call__(self, x):
      self.ncalls += 1
      if self.ncalls > 1:
         raise ValueError("evaluation failed")
      return self.fit(x)

def test_partial_output_removed(make_spectrum, tmp_path):
   base,data = make_spectrum(npo=1000)
   x = linspace(995, 1015, 200)
   fit = FailingFit(BsplineFit(x, response(x), ncoeffs=20))
   header = read_header(base + '.hdr')
   outfile = str(tmp_path / 'cal.dat')
   with pytest.raises(ValueError):
      calibrate_spectrum(fit, header, base + '.dat', outfile, blocksize=100)
   assert fit.ncalls == 2
   assert not os.path.exists(outfile)

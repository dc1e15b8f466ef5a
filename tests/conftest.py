import numpy as num
import pytest

header_template = '''id      = 'Test line spectrum'           / Spectrum identifier
npo     = {npo:20d} / Number of points
wstart  = {wstart:20.10f} / Wavenumber of first point
wstop   = {wstop:20.10f} / Wavenumber of last point
delw    = {delw:20.13E} / Dispersion (cm-1/point)
bocode  =                    0 / Byte order
end
'''

def write_header(filename, wstart, delw, npo):
   wstop = wstart + (npo - 1)*delw
   with open(filename, 'w') as f:
      f.write(header_template.format(npo=npo, wstart=wstart, wstop=wstop,
         delw=delw))

def write_response(filename, x, y):
   with open(filename, 'w') as f:
      for xi,yi in zip(x,y):
         f.write("%.10f %.10f\n" % (xi, yi))

@pytest.fixture
def make_spectrum(tmp_path):
   '''Returns a function that writes an XGremlin spectrum (.dat + .hdr) and
   returns its base name and the raw data.'''
   def _make(wstart=1000.0, delw=0.001, npo=10000, data=None, name='spec'):
      base = str(tmp_path / name)
      if data is None:
         rng = num.random.default_rng(42)
         data = rng.uniform(1.0, 10.0, npo)
      data = num.asarray(data, dtype=num.float32)
      data.tofile(base + '.dat')
      write_header(base + '.hdr', wstart, delw, npo)
      return base,data
   return _make

@pytest.fixture
def make_response(tmp_path):
   '''Returns a function that writes a response file and returns its name.'''
   def _make(x, y, name='response.txt'):
      filename = str(tmp_path / name)
      write_response(filename, x, y)
      return filename
   return _make

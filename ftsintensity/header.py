'''
Reading of XGremlin header (.hdr) files. An XGremlin line spectrum comes as
a pair of files:  <name>.dat holds the raw 32-bit floats and <name>.hdr is a
line-oriented text header, mostly FITS-like cards of the form

   wstart  =         1000.00000000 / Wavenumber of first point

Fields are located by their key, not by column, so any amount of white space
is fine. Only the numeric fields needed to lay out the spectrum are read;
the header itself is copied verbatim to the calibrated spectrum.
'''

import shutil
import numpy as num

# XGremlin header tags for required variables
XMIN_TAG = 'wstart'
XMAX_TAG = 'wstop'
DELTAX_TAG = 'delw'
NUM_PTS_TAG = 'npo'


class HeaderFieldError(LookupError):
   '''A required field is missing from the header.'''
   pass


class SpectrumHeader:
   '''The layout of a line spectrum:  the wavenumber of the first (wstart)
   and last (wstop) points, the point spacing (delw) and the number of points
   (npo).'''

   def __init__(self, wstart, wstop, delw, npo, filename=None):
      self.wstart = float(wstart)
      self.wstop = float(wstop)
      self.delw = float(delw)
      self.npo = int(npo)
      self.filename = filename

   def abscissa(self, i):
      '''Wavenumber of point(s) i.'''
      return i*self.delw + self.wstart

   def __repr__(self):
      return "<SpectrumHeader: wstart %g, wstop %g, delw %g, npo %d>" % \
            (self.wstart, self.wstop, self.delw, self.npo)


def split_card(line):
   '''Split a header line into its key and its value tokens. Cards with an
   '=' are split there and anything after a '/' is treated as a comment;
   other lines are split on white space.

   Returns:
      2-tuple: (key, tokens), key is None for a blank line
   '''
   if '=' in line:
      key,val = line.split('=', 1)
      key = key.strip()
      tokens = val.split('/', 1)[0].split()
   else:
      tokens = line.split()
      if not tokens:
         return None,[]
      key = tokens[0]
      tokens = tokens[1:]
   return key,tokens

def get_header_field(fp, tag):
   '''Search the header attached to file object fp for the variable tag and
   return its value as a float. The file is rewound first, so this can be
   called repeatedly on the same open file.

   Args:
      fp (file):  open header file (text mode)
      tag (str):  name of the field

   Returns:
      float:  the field value

   Raises:
      HeaderFieldError:  tag was not found, or has no numeric value
   '''
   fp.seek(0)
   for line in fp:
      key,tokens = split_card(line)
      if key != tag:
         continue
      if not tokens:
         raise HeaderFieldError("Header field %s has no value" % tag)
      # Fortran-style exponents:  1.0D-03
      value = tokens[0].replace('D','E').replace('d','e')
      try:
         return float(value)
      except ValueError:
         raise HeaderFieldError("Header field %s has non-numeric value %s" % \
               (tag, tokens[0]))
   raise HeaderFieldError("Field %s not found in header" % tag)

def read_header(filename):
   '''Load an XGremlin header and extract wstart, wstop, delw and npo.

   Args:
      filename (str):  the .hdr file

   Returns:
      SpectrumHeader instance
   '''
   try:
      fp = open(filename, 'r', encoding='latin-1')
   except IOError as e:
      raise IOError("Unable to open %s: %s" % (filename, e.strerror))
   with fp:
      try:
         wstart = get_header_field(fp, XMIN_TAG)
         wstop = get_header_field(fp, XMAX_TAG)
         delw = get_header_field(fp, DELTAX_TAG)
         npo = get_header_field(fp, NUM_PTS_TAG)
      except HeaderFieldError as e:
         raise HeaderFieldError("Couldn't load the required XGremlin header "
                                "data from %s: %s" % (filename, e))
   for tag,value in zip((XMIN_TAG, XMAX_TAG, DELTAX_TAG, NUM_PTS_TAG),
                        (wstart, wstop, delw, npo)):
      if not num.isfinite(value):
         raise HeaderFieldError("Header %s has a non-finite %s (%s)" % \
               (filename, tag, value))
   npo = int(npo)
   if npo < 0:
      raise ValueError("Header %s has a negative number of points" % filename)
   return SpectrumHeader(wstart, wstop, delw, npo, filename=filename)

def copy_header(src, dst):
   '''Produce an exact copy of the input header for the calibrated
   spectrum.'''
   shutil.copyfile(src, dst)

'''Loading of the normalised response function: a text file with one
whitespace-separated (x,y) pair per line, ascending in x.'''

import numpy as num


class ResponseFileError(ValueError):
   '''The response file could not be parsed.'''
   pass


def load_response(filename, verbose=False):
   '''Read the (x,y) samples of a response function, in file order. Blank
   lines and lines starting with '#' are skipped; anything after the second
   column is ignored.

   Args:
      filename (str):  the response file
      verbose (bool):  print each sample as it is read

   Returns:
      2-tuple of float arrays:  (x, y)
   '''
   try:
      f = open(filename, 'r', encoding='latin-1')
   except IOError as e:
      raise IOError("Unable to open %s: %s" % (filename, e.strerror))
   xs = []
   ys = []
   with f:
      for i,line in enumerate(f):
         fields = line.split()
         if not fields or fields[0][0] == '#':
            continue
         if len(fields) < 2:
            raise ResponseFileError("%s, line %d: expected two columns" % \
                  (filename, i+1))
         try:
            xi = float(fields[0])
            yi = float(fields[1])
         except ValueError:
            raise ResponseFileError("%s, line %d: could not parse '%s'" % \
                  (filename, i+1, line.strip()))
         xs.append(xi)
         ys.append(yi)
         if verbose:
            print("%g, %g" % (xi, yi))
   if not xs:
      raise ResponseFileError("%s contains no data" % filename)
   return num.array(xs),num.array(ys)

'''A basis-spline module. The basis functions are hidden from python view in
the scipy.interpolate fitting routines, but a least-squares fit with its
covariance needs the design matrix itself, so we make our own using the
Cox - de Boor recursion.

The splines here are clamped:  the first and last breakpoints are repeated
<degree> extra times, so a set of Nb breakpoints and a spline of degree k
gives Nb + k - 1 basis functions (Nb + 2 for a cubic).'''

import numpy as num

def memo(f):
   # Peter Norvig's
   """Memoize the return value for each call to f(args).
   Then when called again with same args, we can just look it up."""
   cache = {}

   def _f(*args):
      try:
         return cache[args]
      except KeyError:
         cache[args] = result = f(*args)
         return result
      except TypeError:
         # some element of args can't be a dict key
         return f(*args)
   _f.cache = cache
   return _f

def uniform_breakpoints(xmin, xmax, nbreak):
   '''Place nbreak equally-spaced breakpoints on the interval [xmin,xmax].

   Args:
      xmin (float): start of the interval
      xmax (float): end of the interval
      nbreak (int): number of breakpoints, including both end-points

   Returns:
      float array of length nbreak. The end-points are exactly xmin and xmax.
   '''
   if nbreak < 2:
      raise ValueError("You need at least two breakpoints")
   if not xmax > xmin:
      raise ValueError("xmax must be greater than xmin")
   return num.linspace(xmin, xmax, int(nbreak))

def bspline_basis(knots, u, degree):
   '''Compute the basis functions for a b-spline interpolation.

   Args:
      knots (list or array length N): the breakpoint positions.
      u (list or array length M): the evaluation points of the spline
      degree (int): The degree of the spline (e.g., 3 == cubic)

   Returns:
      2-d array with shape (M,N+degree-1). The basis is a partition of
      unity on the closed interval [knots[0],knots[-1]] and is zero
      everywhere outside it.
   '''
   try:
      knots = num.asarray(knots, dtype=float)
   except (TypeError, ValueError):
      raise ValueError("knots must be a list type or array")
   if len(num.shape(knots)) != 1:
      raise ValueError("knots must be a 1d array/list")
   if knots.shape[0] < 2:
      raise ValueError("You must have at least 2 breakpoints")
   if not num.all(num.greater(knots[1:] - knots[:-1],0)):
      raise ValueError("knots must be strictly increasing")
   u = num.atleast_1d(num.asarray(u, dtype=float))
   kv = num.concatenate([[knots[0]]*degree,
                         knots,
                         [knots[-1]]*degree])
   off = kv[0]
   scale = (kv[-1]-kv[0])
   kv = (kv - off)/scale    # map to 0 -> 1
   u = (u - off)/scale

   # Cox - DeBoor recursive function to calculate basis
   @memo
   def coxDeBoor(k, d):
      # Test for end conditions
      if (d == 0):
         if kv[k+1] == kv[-1] and kv[k] < kv[k+1]:
            # last non-empty interval is closed on the right
            return num.where(num.greater_equal(u-kv[k],0)*\
                             num.less_equal(u-kv[k+1],0),1.0, 0.0)
         return num.where(num.greater_equal(u-kv[k],0)*\
                          num.less(u-kv[k+1],0),1.0, 0.0)
      denom1 = kv[k + d] - kv[k]
      term1 = 0
      if denom1 > 0:
         term1 = ((u - kv[k]) / denom1) * coxDeBoor(k, d - 1)

      denom2 = kv[k + d + 1] - kv[k + 1]
      term2 = 0
      if denom2 > 0:
         term2 = ((-(u - kv[k + d + 1]) / denom2) * coxDeBoor(k + 1, d - 1))

      return term1 + term2

   # Compute basis for each point
   b = num.column_stack([coxDeBoor(k, degree) for k in range(len(kv)-degree-1)])
   return b

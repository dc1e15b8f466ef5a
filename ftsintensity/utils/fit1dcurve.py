'''This module provides a base class for a 1D curve fitted to (x,y) data,
with a consistent API for evaluation, error estimates and fit statistics,
and a least-squares B-spline implementation of it.

The B-spline fit is a single, direct linear solve:  the basis functions are
evaluated at the data to form the design matrix, and the weighted
least-squares problem is solved by singular value decomposition, giving the
spline coefficients and their covariance matrix.'''

import sys
import numpy as num
from scipy import linalg
from ftsintensity.utils.bspline import bspline_basis, uniform_breakpoints


class InsufficientDataError(ValueError):
   '''There are not enough data points to constrain the fit.'''
   pass


class oneDcurve:
   '''Base class for 1D fitted curves. Each subclass inherits the basic
   structure defined below, but is responsible for implementing the
   evaluation.'''

   def __init__(self, x, y, w=None):
      '''Instantiate a new curve.

      Args:
         x (float array):  independent variable
         y (float array):  dependent variable
         w (float array):  weights of the data (default:  all 1.0)
      '''

      x = num.atleast_1d(num.asarray(x, dtype=float))
      y = num.atleast_1d(num.asarray(y, dtype=float))
      if w is None:
         w = num.ones(x.shape)
      w = num.atleast_1d(num.asarray(w, dtype=float))

      if not len(x.shape) == 1:
         raise ValueError("x, y, w must be 1D arrays")
      if not x.shape == y.shape:
         raise ValueError("x, y must have same shape")
      if not y.shape == w.shape:
         raise ValueError("y, w must have same shape")
      if num.any(num.less(w, 0)):
         raise ValueError("weights must be non-negative")

      self.x = x
      self.y = y
      self.w = w

   def __call__(self, x):
      '''Return the curve at point(s) x.

      Args:
         x (float array or scalar):  Location at which to compute the curve

      Returns:
         2-tuple:  (y, mask)

         - y (float array or scalar): curve. type matches input x. Zero
           wherever mask is False.
         - mask (bool array or scalar): False indicates x is outside the
           domain.
      '''
      scalar = (len(num.shape(x)) == 0)
      x = num.atleast_1d(num.asarray(x, dtype=float))
      xmin,xmax = self.domain()
      mask = num.greater_equal(x, xmin)*num.less_equal(x, xmax)
      y = num.zeros(x.shape)
      if num.any(mask):
         y[mask] = self.evaluate(x[mask], errors=False)[0]
      if scalar:
         return y[0],mask[0]
      return y,mask

   def evaluate(self, x, errors=True):
      '''Evaluate the curve and its standard error at x, without any
      check on the domain.

      Returns:
         2-tuple: (y, yerr), yerr is None unless errors is True
      '''
      raise NotImplementedError('Derived class must overide')

   def error(self, x):
      '''Estimate the error in the curve at the point x.

      Args:
         x (float array or scalar): location at which to compute error

      Returns:
         float array or scalar:  the error (type matches input x)
      '''
      return self.evaluate(x)[1]

   def residuals(self):
      '''Compute the residuals (data - model).

      Returns:
         float array: residuals
      '''
      return self.y - self.evaluate(self.x, errors=False)[0]

   def rms(self):
      '''Returns RMS of residuals.'''
      return num.sqrt(num.mean(num.power(self.residuals(),2)))

   def chisquare(self):
      '''Returns the (weighted) chi-square statistic.'''
      return num.sum(num.power(self.residuals(),2)*self.w)

   def rchisquare(self):
      '''Returns the reduced chi-square statistic.'''
      raise NotImplementedError('Derived class must overide')

   def DW(self):
      '''Returns the Durbin-Watson statistic of the residuals.'''
      r = self.residuals()
      return num.sum(num.power(r[1:] - r[:-1],2))/num.sum(num.power(r,2))

   def domain(self):
      '''Return the valid domain for this curve.

      Returns:
         2-tuple:  (xmin, xmax):  the domain of the function.
      '''
      raise NotImplementedError('Derived class must overide')

   def plot(self, outfile=None, xlabel='x', ylabel='y'):
      '''Plot the data, the curve (with its 1-sigma band) and the residuals.

      Args:
         outfile (str):  If given, save the figure to this file.
         xlabel,ylabel (str):  axis labels

      Returns:
         matplotlib Figure instance
      '''
      from matplotlib import pyplot as plt
      xmin,xmax = self.domain()
      xx = num.linspace(xmin, xmax, 1000)
      yy,ee = self.evaluate(xx)

      fig = plt.figure()
      ax = fig.add_subplot(211)
      ax.plot(self.x, self.y, 'o', ms=2, color='k')
      ax.plot(xx, yy, '-', color='r')
      ax.fill_between(xx, yy-ee, yy+ee, color='r', alpha=0.3)
      ax.set_ylabel(ylabel)
      ax2 = fig.add_subplot(212, sharex=ax)
      ax2.plot(self.x, self.residuals(), 'o', ms=2, color='k')
      ax2.axhline(0, color='r')
      ax2.set_xlabel(xlabel)
      ax2.set_ylabel('residuals')
      if outfile is not None:
         fig.savefig(outfile)
         plt.close(fig)
      return fig


class BsplineFit(oneDcurve):
   '''A least-squares B-spline with uniformly spaced breakpoints between the
   first and last x values. The data must be sorted in ascending x.

   After construction, the following are available:
      coef (float array):  the N spline coefficients
      cov (float array):  their NxN covariance matrix
      chisq (float):  weighted residual sum of squares
      dof (int):  degrees of freedom (n - N)
      tss (float):  weighted total sum of squares
      Rsq (float):  1 - chisq/tss (NaN if tss is zero)
      rank (int):  effective rank of the design matrix
   '''

   order = 4            # cubic
   blocksize = 4096     # evaluation points handled per basis evaluation

   def __init__(self, x, y, w=None, ncoeffs=200):
      '''
      Args:
         x (float array):  independent variable, ascending
         y (float array):  dependent variable
         w (float array):  weights (default: 1.0 for every point)
         ncoeffs (int):  number of spline coefficients, at least 4
      '''
      oneDcurve.__init__(self, x, y, w)
      ncoeffs = int(ncoeffs)
      if ncoeffs < self.order:
         raise ValueError("The spline fit must contain at least %d "
                          "coefficients." % self.order)
      n = self.x.shape[0]
      if n <= ncoeffs:
         raise InsufficientDataError("There must be more data points (%d) "
               "than spline fit coefficients (%d)." % (n, ncoeffs))
      self.ncoeffs = ncoeffs
      self.xmin = self.x[0]
      self.xmax = self.x[-1]
      self.knots = uniform_breakpoints(self.xmin, self.xmax,
            ncoeffs + 2 - self.order)
      self._fit()

   def basis(self, x):
      '''Evaluate the N basis functions at x. Returns an array of shape
      (len(x),N).'''
      return bspline_basis(self.knots, x, self.order-1)

   def _fit(self):
      n = self.x.shape[0]
      X = self.basis(self.x)
      if X.shape[1] != self.ncoeffs:
         raise RuntimeError("Basis has %d functions, expected %d" % \
               (X.shape[1], self.ncoeffs))
      sw = num.sqrt(self.w)
      A = X*sw[:,num.newaxis]
      b = self.y*sw

      # balance the columns before decomposing, as GSL's multifit does.
      D = num.sqrt(num.sum(num.power(A,2), axis=0))
      D = num.where(num.greater(D, 0), D, 1.0)
      U,s,Vt = linalg.svd(A/D[num.newaxis,:], full_matrices=False,
            lapack_driver='gesvd')

      # discard singular values that are numerically zero
      keep = num.greater(s, num.finfo(float).eps*s[0])
      sinv = num.zeros(s.shape)
      sinv[keep] = 1.0/s[keep]
      V = num.transpose(Vt)/D[:,num.newaxis]

      self.coef = num.dot(V, sinv*num.dot(num.transpose(U), b))
      self.cov = num.dot(V*num.power(sinv,2)[num.newaxis,:], num.transpose(V))
      self.rank = int(num.sum(keep))

      self.chisq = num.sum(num.power(b - num.dot(A, self.coef),2))
      self.dof = n - self.ncoeffs
      wmean = num.sum(self.w*self.y)/num.sum(self.w)
      self.tss = num.sum(self.w*num.power(self.y - wmean,2))
      if self.tss > 0:
         self.Rsq = 1.0 - self.chisq/self.tss
      else:
         self.Rsq = num.nan

   def evaluate(self, x, errors=True):
      '''Evaluate the spline and its standard error at x. Outside the
      domain the basis is zero, so use __call__ if x may be out of range.

      Args:
         x (float array or scalar):  where to evaluate
         errors (bool):  also compute the standard error, which costs
                         O(N**2) per point. If False, yerr is None.

      Returns:
         2-tuple:  (y, yerr), types match input x
      '''
      scalar = (len(num.shape(x)) == 0)
      x = num.atleast_1d(num.asarray(x, dtype=float))
      y = num.zeros(x.shape)
      yerr = num.zeros(x.shape)
      for i0 in range(0, x.shape[0], self.blocksize):
         i1 = min(i0 + self.blocksize, x.shape[0])
         B = self.basis(x[i0:i1])
         y[i0:i1] = num.dot(B, self.coef)
         if not errors:
            continue
         var = num.sum(num.dot(B, self.cov)*B, axis=1)
         yerr[i0:i1] = num.sqrt(num.maximum(var, 0))
      if not errors:
         yerr = None
      elif scalar:
         yerr = yerr[0]
      if scalar:
         y = y[0]
      return y,yerr

   def rchisquare(self):
      return self.chisq/self.dof

   def domain(self):
      return (self.xmin, self.xmax)

   def summary(self, out=None):
      '''Print the fit statistics to out (default: stdout).'''
      if out is None:
         out = sys.stdout
      print("chisq/dof = %e, Rsq = %f" % (self.chisq/self.dof, self.Rsq),
            file=out)

   def __repr__(self):
      return "<BsplineFit: N=%d on [%g,%g], chisq/dof=%g>" % \
            (self.ncoeffs, self.xmin, self.xmax, self.chisq/self.dof)

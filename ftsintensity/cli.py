'''The ftsintensity command-line program.'''

import argparse
import re
import sys
from ftsintensity import __version__
from ftsintensity.calibrate import calibrate, DEFAULT_NUM_COEFFS
from ftsintensity.utils.fit1dcurve import BsplineFit

description = "ftsintensity : Calibrates the intensity of an FTS line spectrum"

epilog = '''The spectrum is read from <spectrum>.dat and <spectrum>.hdr; the
calibrated spectrum is written to <output>.dat and <output>.hdr.'''


class ArgumentParser(argparse.ArgumentParser):
   '''Exits with status 1, after the help text, on a usage error.'''

   def error(self, message):
      self.print_help(sys.stderr)
      self.exit(1, "\nERROR: %s\n" % message)


def get_parser():
   parser = ArgumentParser(prog='ftsintensity', description=description,
         epilog=epilog)
   parser.add_argument('spectrum', help="An XGremlin line spectrum (do not "
         "include the '.dat' extension).")
   parser.add_argument('response', help="The normalised response function "
         "given by ftsresponse.")
   parser.add_argument('output', help="The calibrated line spectrum will be "
         "saved here.")
   parser.add_argument('coeffs', nargs='?', default=None,
         help="Number of spline fit coefficients. A larger value will reduce "
         "smoothing, allowing higher frequencies to be fitted, but could "
         "cause fit instabilities if too high (default %d)." % \
         DEFAULT_NUM_COEFFS)
   parser.add_argument('-q', '--quiet', action='store_true',
         help="Only report errors")
   parser.add_argument('-v', '--verbose', action='store_true',
         help="Also print the response function as it is read")
   parser.add_argument('--plot', metavar='FILE', default=None,
         help="Save a plot of the response function fit to FILE")
   parser.add_argument('--version', action='version',
         version='%(prog)s ' + __version__)
   return parser

def get_num_coefficients(parser, coeffs):
   '''Determines how many spline coefficients are to be used in the
   response function fit.'''
   if coeffs is None:
      return DEFAULT_NUM_COEFFS
   if not re.match(r'^[0-9]+$', coeffs):
      parser.error("Argument 4 must be a number.")
   ncoeffs = int(coeffs)
   if ncoeffs < BsplineFit.order:
      parser.error("The spline fit must contain at least %d coefficients." % \
            BsplineFit.order)
   return ncoeffs

def main(argv=None):
   parser = get_parser()
   args = parser.parse_args(argv)
   ncoeffs = get_num_coefficients(parser, args.coeffs)
   if args.quiet:
      verbose = 0
   elif args.verbose:
      verbose = 2
   else:
      verbose = 1

   if verbose:
      print("Normalise an FTS Line Spectrum %s" % __version__)
      print("--------------------------------------------------------")
      print("Line Spectrum file  : %s" % args.spectrum)
      print("Response function   : %s" % args.response)
      print("Output file         : %s" % args.output)

   try:
      calibrate(args.spectrum, args.response, args.output, ncoeffs=ncoeffs,
            verbose=verbose, plotfile=args.plot)
   except (IOError, ValueError, LookupError) as e:
      sys.stdout.flush()
      sys.stderr.write("ERROR: %s\n" % e)
      return 1
   return 0

if __name__ == '__main__':
   sys.exit(main())

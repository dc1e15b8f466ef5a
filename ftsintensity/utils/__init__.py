'''Curve-fitting utilities:  B-spline basis functions (bspline) and fitted
1D curves (fit1dcurve).'''

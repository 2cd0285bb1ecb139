## vector algebra for yapTopo, in the homogeneous-coordinate
## conventions of yapCAD
## Copyright (c) 2020 Richard DeVaul
## Copyright (c) 2025 yapCAD contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""elementary vector operations for **yapTopo**

The topology kernel never does any real geometry of its own; it only
needs to move points around while sweeping.  This module supplies the
small set of vector operations it relies on.

Vectors and points are homogeneous coordinate 4-lists ``[x, y, z, w]``.
Points live in the ``w = 1`` hyperplane.  The R^3 functions below ignore
the ``w`` component of their arguments and always return ``w = 1``.

``epsilon`` is the empirically-chosen closeness tolerance.  Redefine it
at your peril.
"""

from copy import deepcopy
from math import sqrt, pi

## constants
epsilon=0.000005
pi2 = 2.0*pi

## operations on scalars
## -----------------------

## booleans are ints to python, but True is not a coordinate

def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n,bool)) and isinstance(n,(int,float))

def close(a,b):
    """ are two scalars the same within epsilon
    """
    return abs(a-b) < epsilon


## operations on vectors
## ------------------------

def vect(a=False,b=False,c=False,d=False):
    """Convenience function for making a homogeneous coordinates 4 vector
from practically anything
    """
    r = [0,0,0,1]
    if isgoodnum(a):
        r[0]=a
        if isgoodnum(b):
            r[1]=b
            if isgoodnum(c):
                r[2]=c
                if isgoodnum(d):
                    r[3]=d
    elif isinstance(a,(tuple,list)):
        for i in range(min(4,len(a))):
            x=a[i]
            if isgoodnum(x):
                r[i]=x
    return r

def isvect(x):
    """
    check to see if argument is a proper vector for our purposes
    """
    return isinstance(x,list) and len(x) == 4 and all(isgoodnum(c) for c in x)

def vclose(a,b):
    """ are two vectors the same to within epsilon"""
    return close(mag(sub(a,b)),0)

## R^3 -> R^3 functions: ignore w component
## ------------------------------------------------
def add(a,b):
    """ 3 vector, `a + b`"""
    return [a[0]+b[0],a[1]+b[1],a[2]+b[2],1.0]

def sub(a,b):
    """ 3 vector, `a - b`"""
    return [a[0]-b[0],a[1]-b[1],a[2]-b[2],1.0]

def scale3(a,c):
    """ 3 vector, vector ''a'' times scalar ``c``, `a * c`"""
    return [a[0]*c,a[1]*c,a[2]*c,1.0]

def cross(a,b):
    """Compute the cross product of a x b, assuming that both
    fall into the w=1 hyperplane
    """
    return [ a[1]*b[2] - a[2]*b[1],
             a[2]*b[0] - a[0]*b[2],
             a[0]*b[1] - a[1]*b[0],
             1.0 ]

def normalize(a):
    """unit-length copy of 3 vector ``a``; zero-length vectors are an
    error since they have no direction"""
    m = mag(a)
    if m < epsilon:
        raise ValueError('cannot normalize zero-length vector: {}'.format(a))
    return scale3(a,1.0/m)

## R^3 -> R functions -- ignore w component
## ----------------------------------------
def dot(a,b):
    """ 3 vector ``a`` dot ``b`` """
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]

def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(a[0]*a[0]+a[1]*a[1]+a[2]*a[2])

def dist(a,b):
    """ compute the euclidean distance between two 3 vector points ``a`` and ``b``"""
    return mag(sub(a,b))


## points
## ------

def point(x=False,y=False,z=False,w=False):
    """Point creation from point, sequence or scalars"""
    if ispoint(x):
        return deepcopy(x)
    if isinstance(x,(tuple,list)):
        r = vect(x)
    else:
        r = vect(x,y,z,w)
    if r[3] > 0:
        return r
    else:
        raise ValueError('bad w argument to point()')

def ispoint(x):
    """ is it a point?"""
    return isvect(x) and x[3] > 0.0

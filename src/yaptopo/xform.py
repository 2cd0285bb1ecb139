## matrix transformation operations for 3D homogeneous coordinates
## in yapTopo

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

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

from math import cos, sin, degrees
import yaptopo.geom as geom

## a matrix is represented as a list of four four-vectors, one per
## row. Vectors are treated as column vectors, so M.mul(x) computes
## Mx.  Extrusion operators want a point -> point callable rather
## than a matrix; pointmap() adapts one to the other.


class Matrix:
    """4x4 transformation matrix class for transforming homogeneous 3D coordinates"""

    def __init__(self,a=False):
        self.m = [[1,0,0,0],
                  [0,1,0,0],
                  [0,0,1,0],
                  [0,0,0,1]]

        if isinstance(a,Matrix):
            self.m = [list(r) for r in a.m]
        elif isinstance(a,(tuple,list)):
            if len(a) == 4 and all(isinstance(r,(tuple,list)) and len(r) == 4
                                   for r in a):
                vals = [x for r in a for x in r]
            elif len(a) == 16:
                vals = list(a)
            else:
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
            for ind, x in enumerate(vals):
                if not geom.isgoodnum(x):
                    raise ValueError('bad element in matrix initialization: {}'.format(x))
                self.m[ind // 4][ind % 4] = x
        elif a is not False:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))

    def __repr__(self):
        return "Matrix({},{},{},{})".format(*self.m)

    def getcol(self,j):
        if j < 0 or j > 3:
            raise ValueError('bad column passed to getcol: {}'.format(j))
        return [self.m[0][j], self.m[1][j], self.m[2][j], self.m[3][j]]

    # matrix multiply.  If x is a matrix, compute MX.  If x is a
    # vector, compute Mx.
    def mul(self,x):
        if isinstance(x,Matrix):
            return Matrix([[_dot4(self.m[i],x.getcol(j)) for j in range(4)]
                           for i in range(4)])
        elif geom.isvect(x):
            return [_dot4(self.m[i],x) for i in range(4)]
        raise ValueError('bad thing passed to mul(): {}'.format(x))

    def linear(self):
        """upper-left 3x3 block, as nested lists"""
        return [self.m[i][:3] for i in range(3)]

    def translation(self):
        return [self.m[0][3], self.m[1][3], self.m[2][3], 1.0]


def _dot4(a,b):
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]+a[3]*b[3]


# return the generalized 4x4 arbitrary axis rotation matrix, angle in
# degrees
def Rotation(axis,angle,inverse=False):
    m = geom.mag(axis)
    if m < geom.epsilon:
        raise ValueError('zero-length rotation axis not allowed')
    u = geom.scale3(axis,1.0/m)

    if inverse:
        angle *= -1.0
    rad = (angle%360.0)*geom.pi2/360.0

    ux = u[0]
    uy = u[1]
    uz = u[2]

    cang = cos(rad)
    cmin = 1.0-cang
    sang = sin(rad)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    R = [[cang + ux*ux*cmin, ux*uy*cmin-uz*sang, ux*uz*cmin+uy*sang,0],
         [uy*ux*cmin+uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang,0],
         [uz*ux*cmin-uy*sang, uz*uy*cmin+ux*sang, cang+uz*uz*cmin,0],
         [0,0,0,1]]

    return Matrix(R)

def Translation(delta,inverse=False):
    if inverse:
        delta = geom.scale3(delta,-1.0)
    T = [[1,0,0,delta[0]],
         [0,1,0,delta[1]],
         [0,0,1,delta[2]],
         [0,0,0,1]]
    return Matrix(T)

def Scale(x,y=False,z=False,inverse=False):
    if geom.isgoodnum(x):
        sx = x
        if geom.isgoodnum(y) and geom.isgoodnum(z):
            sy = y
            sz = z
        else:
            sy = sz = x
    elif geom.isvect(x):
        sx, sy, sz = x[0], x[1], x[2]
    else:
        raise ValueError('bad scaling values passed to Scale')

    if inverse:
        sx = 1.0/sx
        sy = 1.0/sy
        sz = 1.0/sz

    S = [[sx,0,0,0],
         [0,sy,0,0],
         [0,0,sz,0],
         [0,0,0,1.0]]
    return Matrix(S)


## rotate vector v by angle (radians) about axis; w is preserved as 1
def rotate(v,axis,angle):
    r = Rotation(axis,degrees(angle)).mul(geom.vect(v[0],v[1],v[2],0))
    return [r[0],r[1],r[2],1.0]

## wrap a matrix as a point -> point function, the form the extrusion
## operators expect
def pointmap(M):
    def apply(p):
        r = M.mul(geom.vect(p[0],p[1],p[2],1))
        if geom.close(r[3],1.0):
            return [r[0],r[1],r[2],1.0]
        return [r[0]/r[3],r[1]/r[3],r[2]/r[3],1.0]
    return apply
